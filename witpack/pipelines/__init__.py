"""Pipeline drivers that run one external step over every WIT source."""

from .base import Pipeline
from .package import PackagePipeline, artifact_path
from .publish import PublishPipeline
from .stage import StagePipeline
from .validate import ValidatePipeline

__all__ = [
    "PackagePipeline",
    "Pipeline",
    "PublishPipeline",
    "StagePipeline",
    "ValidatePipeline",
    "artifact_path",
]
