"""Public package entrypoint for the universal FFmpeg build orchestrator."""

from .catalog import default_catalog, ffmpeg_descriptor
from .config import BuildLayout, BuildSettings, resolve_versions
from .errors import (
    CompileError,
    ConfigureError,
    DependencyError,
    FetchError,
    FfbuildError,
    InstallError,
    MergeError,
    ReproducibilityError,
    ToolchainError,
    ValidationError,
    VerificationError,
)
from .manifest import BuildManifest
from .models import (
    ArchitectureTarget,
    BuildResult,
    CacheEntry,
    LibraryDescriptor,
    OutputArtifact,
    PipelineResult,
)
from .orchestrator import BuildReport, UniversalBuild
from .patches import SourcePatch

__all__ = [
    "ArchitectureTarget",
    "BuildLayout",
    "BuildManifest",
    "BuildReport",
    "BuildResult",
    "BuildSettings",
    "CacheEntry",
    "CompileError",
    "ConfigureError",
    "DependencyError",
    "FetchError",
    "FfbuildError",
    "InstallError",
    "LibraryDescriptor",
    "MergeError",
    "OutputArtifact",
    "PipelineResult",
    "ReproducibilityError",
    "SourcePatch",
    "ToolchainError",
    "UniversalBuild",
    "ValidationError",
    "VerificationError",
    "default_catalog",
    "ffmpeg_descriptor",
    "resolve_versions",
]
