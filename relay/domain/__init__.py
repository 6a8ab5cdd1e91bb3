"""Domain models for Relay workflows."""

from .artifact import Artifact, ArtifactStore
from .identifiers import FeatureId, IssueId, slugify_feature
from .step_result import StepResult

__all__ = [
    "Artifact",
    "ArtifactStore",
    "FeatureId",
    "IssueId",
    "slugify_feature",
    "StepResult",
]
