"""Capability registry keyed by kind and extension."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from assetpipe.capabilities.base import Capability, CapabilityKind
from assetpipe.capabilities.css import CSS_COMPRESSOR
from assetpipe.capabilities.sass import SASS_CONVERTER, SCSS_CONVERTER
from assetpipe.errors import DuplicateCapabilityError, RegistryFrozenError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "assetpipe.capabilities"

BUILTIN_CAPABILITIES: Mapping[str, Capability] = {
    "scss": SCSS_CONVERTER,
    "sass": SASS_CONVERTER,
    "css": CSS_COMPRESSOR,
}


class CapabilityRegistry:
    """Maps `(kind, extension)` to exactly one capability.

    A second registration for an occupied slot is rejected with
    `DuplicateCapabilityError`. The registry is populated once at startup and
    frozen; lookups afterwards need no locking.
    """

    def __init__(self) -> None:
        self._tables: dict[CapabilityKind, dict[str, Capability]] = {
            CapabilityKind.CONVERTER: {},
            CapabilityKind.COMPRESSOR: {},
        }
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(self, capability: Capability) -> None:
        if capability.kind is CapabilityKind.CONVERTER:
            self.register_converter(capability)
        else:
            self.register_compressor(capability)

    def register_converter(self, capability: Capability) -> None:
        self._insert(CapabilityKind.CONVERTER, capability)

    def register_compressor(self, capability: Capability) -> None:
        self._insert(CapabilityKind.COMPRESSOR, capability)

    def find_converter(self, extension: str) -> Capability | None:
        return self._tables[CapabilityKind.CONVERTER].get(extension)

    def find_compressor(self, extension: str) -> Capability | None:
        return self._tables[CapabilityKind.COMPRESSOR].get(extension)

    def capabilities(self) -> list[Capability]:
        """Return every registration ordered by kind then extension."""

        return [
            table[extension]
            for table in self._tables.values()
            for extension in sorted(table)
        ]

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())

    def load_entrypoints(self, group: str = ENTRY_POINT_GROUP) -> int:
        """Register capabilities published by installed distributions.

        An entry point may resolve to a single `Capability` or an iterable of
        them. Entry points that fail to import are skipped with a warning;
        conflicting registrations are not.
        """

        from importlib.metadata import entry_points

        registered = 0
        for entry_point in entry_points().select(group=group):
            try:
                loaded = entry_point.load()
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning(
                    "Failed to load capability entry point %s: %s", entry_point.name, exc
                )
                continue

            candidates: Iterable[Any]
            if isinstance(loaded, Capability):
                candidates = [loaded]
            elif isinstance(loaded, Iterable) and not isinstance(loaded, (str, bytes)):
                candidates = loaded
            else:
                logger.warning(
                    "Entry point %s did not resolve to a capability (got %s); skipping.",
                    entry_point.name,
                    type(loaded).__name__,
                )
                continue

            for capability in candidates:
                if not isinstance(capability, Capability):
                    logger.warning(
                        "Entry point %s yielded %r, which is not a capability; skipping.",
                        entry_point.name,
                        capability,
                    )
                    continue
                self.register(capability)
                registered += 1
        return registered

    def _insert(self, kind: CapabilityKind, capability: Capability) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register {capability.name}: the registry is frozen after startup."
            )
        if capability.kind is not kind:
            raise ValueError(
                f"{capability.name} is a {capability.kind.value}, not a {kind.value}."
            )

        table = self._tables[kind]
        extension = capability.handled_extension
        existing = table.get(extension)
        if existing is not None:
            raise DuplicateCapabilityError(kind, extension, existing, capability)

        table[extension] = capability
        logger.debug(
            "Registered %s %s for %s -> %s.",
            kind.value,
            capability.name,
            extension,
            capability.output_extension,
        )


def build_registry(
    names: Iterable[str] = tuple(BUILTIN_CAPABILITIES),
    *,
    include_entrypoints: bool = False,
) -> CapabilityRegistry:
    """Construct and freeze the registry used for a whole process."""

    registry = CapabilityRegistry()
    for name in names:
        try:
            capability = BUILTIN_CAPABILITIES[name]
        except KeyError as exc:
            available = ", ".join(sorted(BUILTIN_CAPABILITIES))
            raise KeyError(f"Unknown capability '{name}'. Available: {available}.") from exc
        registry.register(capability)

    if include_entrypoints:
        discovered = registry.load_entrypoints()
        logger.info("Discovered %s capability(ies) from entry points.", discovered)

    registry.freeze()
    return registry


__all__ = [
    "BUILTIN_CAPABILITIES",
    "ENTRY_POINT_GROUP",
    "CapabilityRegistry",
    "build_registry",
]
