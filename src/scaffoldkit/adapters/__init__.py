"""Adapters binding pipeline ports to HTTP, the filesystem and the terminal."""
