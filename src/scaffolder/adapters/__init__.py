"""Adapters binding ports to the filesystem, the network and the terminal."""
