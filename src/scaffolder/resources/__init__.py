"""Packaged resources for the scaffold CLI."""
