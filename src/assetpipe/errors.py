"""Error taxonomy for the asset pipeline.

Capabilities raise `TransformError`. The registry raises
`CapabilityRegistryError` subclasses while it is being populated at startup,
before any asset is processed. The pipeline wraps a `TransformError` in a
`PipelineError` that names the asset and the stage it failed in.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from assetpipe.capabilities.base import Capability, CapabilityKind
    from assetpipe.core.asset import Asset


class Stage(str, Enum):
    CONVERT = "convert"
    COMPRESS = "compress"


class AssetPipelineError(Exception):
    """Base class for every error raised by assetpipe."""


class TransformError(AssetPipelineError):
    """A capability could not process its input."""

    def __init__(self, capability: str, message: str) -> None:
        super().__init__(f"{capability}: {message}")
        self.capability = capability
        self.message = message


class CapabilityRegistryError(AssetPipelineError):
    """The capability registry was configured incorrectly."""


class DuplicateCapabilityError(CapabilityRegistryError):
    """Two capabilities claimed the same kind and extension."""

    def __init__(
        self,
        kind: CapabilityKind,
        extension: str,
        existing: Capability,
        rejected: Capability,
    ) -> None:
        super().__init__(
            f"A {kind.value} for '{extension}' is already registered "
            f"({existing.name}); refusing to register {rejected.name}."
        )
        self.kind = kind
        self.extension = extension
        self.existing = existing
        self.rejected = rejected


class RegistryFrozenError(CapabilityRegistryError):
    """Registration was attempted after startup completed."""


class PipelineError(AssetPipelineError):
    """A pipeline stage failed for a specific asset."""

    stage: Stage

    def __init__(self, asset: Asset, cause: TransformError) -> None:
        label = asset.name or f"<{asset.extension or 'no extension'} asset>"
        super().__init__(f"{self.stage.value} failed for {label}: {cause}")
        self.asset = asset
        self.cause = cause

    @property
    def capability(self) -> str:
        return self.cause.capability


class ConversionFailed(PipelineError):
    """Stage 1 failed; `asset` is the untouched input."""

    stage = Stage.CONVERT


class CompressionFailed(PipelineError):
    """Stage 2 failed; `asset` is the converted but uncompressed content."""

    stage = Stage.COMPRESS


__all__ = [
    "AssetPipelineError",
    "CapabilityRegistryError",
    "CompressionFailed",
    "ConversionFailed",
    "DuplicateCapabilityError",
    "PipelineError",
    "RegistryFrozenError",
    "Stage",
    "TransformError",
]
