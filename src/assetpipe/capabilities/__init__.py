"""Capabilities and the registry that indexes them."""

from .base import Capability, CapabilityKind
from .registry import BUILTIN_CAPABILITIES, CapabilityRegistry, build_registry

__all__ = [
    "BUILTIN_CAPABILITIES",
    "Capability",
    "CapabilityKind",
    "CapabilityRegistry",
    "build_registry",
]
