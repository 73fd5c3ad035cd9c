"""Resolve, stage, package, validate and publish WIT interface packages."""

__version__ = "0.1.0"
