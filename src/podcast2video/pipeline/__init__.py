"""Pipeline orchestration, workspace handling and publish metadata."""

from podcast2video.pipeline.metadata import PublishMetadata, derive_metadata, strip_markup
from podcast2video.pipeline.orchestrator import Pipeline
from podcast2video.pipeline.workspace import Workspace

__all__ = ["Pipeline", "Workspace", "PublishMetadata", "derive_metadata", "strip_markup"]
