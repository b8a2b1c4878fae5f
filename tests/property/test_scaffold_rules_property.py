from __future__ import annotations

import re

from hypothesis import given, settings
from hypothesis import strategies as st

from scaffolder.app.command_runner import ALLOWED_VERBS, CommandWhitelist
from scaffolder.app.directory_guard import is_empty_listing
from scaffolder.domain.project import is_valid_project_name, normalize_version

LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
DIGITS = "0123456789"

ignored_names = st.one_of(
    st.just("node_modules"),
    st.text(min_size=0, max_size=12).map(lambda tail: "." + tail),
)
visible_names = st.text(min_size=1, max_size=12).filter(
    lambda name: not name.startswith(".") and name != "node_modules"
)

word = st.text(alphabet=LETTERS + DIGITS, max_size=6)
segment = st.tuples(st.sampled_from("-_"), st.sampled_from(LETTERS), word).map("".join)
valid_names = st.tuples(
    st.text(alphabet=LETTERS, min_size=1, max_size=6),
    st.lists(st.one_of(segment, word), max_size=4),
).map(lambda parts: parts[0] + "".join(parts[1]))

numeric = st.integers(min_value=0, max_value=10_000).map(str)
prerelease = st.lists(
    st.one_of(numeric, st.from_regex(r"[0-9]*[a-zA-Z-][0-9a-zA-Z-]{0,4}", fullmatch=True)),
    min_size=1,
    max_size=3,
).map(".".join)
versions = st.tuples(
    st.sampled_from(["", "v"]),
    numeric,
    numeric,
    numeric,
    st.one_of(st.just(""), prerelease.map(lambda p: "-" + p)),
    st.one_of(st.just(""), st.from_regex(r"\+[0-9a-zA-Z-]{1,5}", fullmatch=True)),
).map(lambda p: f"{p[0]}{p[1]}.{p[2]}.{p[3]}{p[4]}{p[5]}")


@settings(max_examples=100)
@given(names=st.lists(ignored_names, max_size=8))
def test_listing_of_hidden_entries_is_empty(names: list[str]) -> None:
    assert is_empty_listing(names)


@settings(max_examples=100)
@given(names=st.lists(ignored_names, max_size=8), extra=visible_names)
def test_any_visible_entry_makes_listing_non_empty(names: list[str], extra: str) -> None:
    assert not is_empty_listing([*names, extra])


@settings(max_examples=200)
@given(name=valid_names)
def test_generated_names_are_accepted(name: str) -> None:
    assert is_valid_project_name(name)


@settings(max_examples=200)
@given(name=valid_names, bad=st.sampled_from(["-", "_", " ", "\t", "--", "-_"]))
def test_trailing_separator_or_whitespace_is_rejected(name: str, bad: str) -> None:
    assert not is_valid_project_name(name + bad)


@settings(max_examples=100)
@given(name=valid_names, digit=st.sampled_from(DIGITS))
def test_leading_digit_is_rejected(name: str, digit: str) -> None:
    assert not is_valid_project_name(digit + name)


@settings(max_examples=200)
@given(version=versions)
def test_version_normalization_is_idempotent(version: str) -> None:
    once = normalize_version(version)
    assert once is not None
    assert normalize_version(once) == once
    assert re.fullmatch(r"[0-9]+\.[0-9]+\.[0-9]+(-[0-9A-Za-z.-]+)?", once)


@settings(max_examples=200)
@given(command=st.text(max_size=10))
def test_whitelist_accepts_only_allowed_verbs(command: str) -> None:
    result = CommandWhitelist().check(command)
    if command in ALLOWED_VERBS:
        assert result == command
    else:
        assert result is None
