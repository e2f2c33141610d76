"""Parsers that turn git and git-lfs output into progress events."""
