"""In-memory asset representation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from assetpipe.capabilities.base import Content


class AssetState(str, Enum):
    RAW = "raw"
    CONVERTED = "converted"
    COMPRESSED = "compressed"


@dataclass(frozen=True, slots=True)
class Asset:
    """Content under transformation.

    `extension` always names the dialect `content` is currently in; it is
    updated by the converter stage, never left at the source file's value.
    """

    content: Content
    extension: str
    converted: bool = False
    compressed: bool = False
    name: str = ""

    @property
    def state(self) -> AssetState:
        if self.compressed:
            return AssetState.COMPRESSED
        if self.converted:
            return AssetState.CONVERTED
        return AssetState.RAW
