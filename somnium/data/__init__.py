"""Bundled world files."""
