"""Dependency resolution and staging of self-contained WIT package trees."""

from .builder import StagingBuilder
from .resolver import DependencyResolver, ResolutionContext

__all__ = ["DependencyResolver", "ResolutionContext", "StagingBuilder"]
