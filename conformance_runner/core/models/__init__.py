"""
Domain models — Pydantic types for the conformance runner.

All models are re-exported here for convenient access:

    from conformance_runner.core.models import ArtifactDescriptor, PlatformIdentity, RunnerConfig
"""

from conformance_runner.core.models.artifact import ArtifactDescriptor
from conformance_runner.core.models.config import RunnerConfig
from conformance_runner.core.models.platform import PlatformIdentity

__all__ = [
    # artifact.py
    "ArtifactDescriptor",
    # platform.py
    "PlatformIdentity",
    # config.py
    "RunnerConfig",
]
