"""Shared fixtures for assetpipe tests."""

from __future__ import annotations

import pytest

from assetpipe.capabilities import Capability, CapabilityRegistry
from assetpipe.errors import TransformError


def _shout(content):  # noqa: ANN001, ANN202
    return content.upper()


def _squash(content):  # noqa: ANN001, ANN202
    return "".join(content.split())


def _reject(content):  # noqa: ANN001, ANN202
    raise TransformError("broken", "refusing to process input")


@pytest.fixture
def shout_converter() -> Capability:
    return Capability.converter("shout", ".low", ".up", _shout)


@pytest.fixture
def squash_compressor() -> Capability:
    return Capability.compressor("squash", ".up", _squash)


@pytest.fixture
def failing_compressor() -> Capability:
    return Capability.compressor("broken", ".up", _reject)


@pytest.fixture
def registry(shout_converter, squash_compressor) -> CapabilityRegistry:
    registry = CapabilityRegistry()
    registry.register_converter(shout_converter)
    registry.register_compressor(squash_compressor)
    registry.freeze()
    return registry
