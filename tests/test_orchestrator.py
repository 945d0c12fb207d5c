"""Pipeline orchestration tests."""

from __future__ import annotations

import logging

import pytest

from assetpipe.capabilities import Capability, CapabilityRegistry, build_registry
from assetpipe.capabilities.sass import SCSS_CONVERTER
from assetpipe.core import Asset, AssetState, Pipeline
from assetpipe.errors import CompressionFailed, ConversionFailed, Stage


class RecordingTransform:
    """Transform function that records the payloads it was called with."""

    def __init__(self, func) -> None:  # noqa: ANN001 - any content callable
        self._func = func
        self.calls: list = []

    def __call__(self, content):  # noqa: ANN001, ANN204
        self.calls.append(content)
        return self._func(content)


def _pipeline(*capabilities: Capability) -> Pipeline:
    registry = CapabilityRegistry()
    for capability in capabilities:
        registry.register(capability)
    registry.freeze()
    return Pipeline(registry=registry, logger=logging.getLogger("assetpipe-test"))


def test_scss_is_converted_then_compressed():
    pipeline = Pipeline(registry=build_registry(["scss", "css"]))

    result = pipeline.process(Asset(content="body { color: red; }", extension=".scss"))

    assert result.extension == ".css"
    assert result.content == "body{color:red}"
    assert result.converted and result.compressed
    assert result.state is AssetState.COMPRESSED


def test_unknown_extension_passes_through_untouched():
    payload = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
    pipeline = Pipeline(registry=build_registry())
    asset = Asset(content=payload, extension=".png")

    result = pipeline.process(asset)

    assert result.content == payload
    assert result.extension == ".png"
    assert result.state is AssetState.RAW
    assert result == asset


def test_compression_only_asset_skips_conversion(squash_compressor):
    pipeline = _pipeline(squash_compressor)

    result = pipeline.process(Asset(content="A B C", extension=".up"))

    assert result.content == "ABC"
    assert not result.converted
    assert result.compressed


def test_compressor_sees_converter_output_extension():
    seen = RecordingTransform(lambda content: content)
    converter = Capability.converter("shout", ".low", ".up", lambda content: content.upper())
    on_source = Capability.compressor("wrong", ".low", lambda content: "compressed too early")
    on_target = Capability.compressor("right", ".up", seen)
    pipeline = _pipeline(converter, on_source, on_target)

    result = pipeline.process(Asset(content="abc", extension=".low"))

    assert seen.calls == ["ABC"]
    assert result.content == "ABC"
    assert result.extension == ".up"


def test_converter_failure_stops_before_compression():
    spy = RecordingTransform(lambda content: content)
    pipeline = _pipeline(SCSS_CONVERTER, Capability.compressor("spy", ".css", spy))
    asset = Asset(content="body { invalid", extension=".scss", name="broken.scss")

    with pytest.raises(ConversionFailed) as excinfo:
        pipeline.process(asset)

    error = excinfo.value
    assert error.stage is Stage.CONVERT
    assert error.capability == "scss"
    assert error.asset is asset
    assert "broken.scss" in str(error)
    assert spy.calls == []


def test_compression_failure_carries_converted_asset(shout_converter, failing_compressor):
    pipeline = _pipeline(shout_converter, failing_compressor)

    with pytest.raises(CompressionFailed) as excinfo:
        pipeline.process(Asset(content="abc", extension=".low"))

    error = excinfo.value
    assert error.stage is Stage.COMPRESS
    assert error.asset.content == "ABC"
    assert error.asset.extension == ".up"
    assert error.asset.state is AssetState.CONVERTED
    assert error.__cause__ is error.cause


def test_process_does_not_mutate_input(registry):
    asset = Asset(content="a b", extension=".low")

    result = Pipeline(registry=registry).process(asset)

    assert asset.content == "a b"
    assert asset.extension == ".low"
    assert result.content == "AB"


def test_process_all_preserves_order_and_reports_failures(shout_converter, failing_compressor):
    pipeline = _pipeline(shout_converter, failing_compressor)
    assets = [
        Asset(content="one", extension=".txt", name="one.txt"),
        Asset(content="two", extension=".low", name="two.low"),
        Asset(content=b"three", extension=".bin", name="three.bin"),
    ]

    summary = pipeline.process_all(assets, max_workers=2)

    assert [result.source.name for result in summary.results] == ["one.txt", "two.low", "three.bin"]
    assert summary.succeeded == 2
    assert summary.failed == 1
    assert summary.degraded == 0
    assert not summary.ok
    failed = summary.results[1]
    assert failed.asset is None
    assert isinstance(failed.error, CompressionFailed)


def test_process_all_can_fall_back_to_uncompressed(shout_converter, failing_compressor, caplog):
    pipeline = _pipeline(shout_converter, failing_compressor)

    with caplog.at_level(logging.WARNING, logger="assetpipe-test"):
        summary = pipeline.process_all(
            [Asset(content="abc", extension=".low", name="a.low")],
            fallback_on_compression_failure=True,
        )

    [result] = summary.results
    assert result.degraded
    assert result.asset.content == "ABC"
    assert isinstance(result.error, CompressionFailed)
    assert summary.failed == 0
    assert summary.degraded == 1
    assert "keeping uncompressed" in caplog.text


def test_process_all_never_falls_back_on_conversion_failure():
    pipeline = Pipeline(registry=build_registry())

    summary = pipeline.process_all(
        [Asset(content="body { invalid", extension=".scss")],
        fallback_on_compression_failure=True,
    )

    [result] = summary.results
    assert result.asset is None
    assert isinstance(result.error, ConversionFailed)


def test_process_all_with_no_assets(registry):
    summary = Pipeline(registry=registry).process_all([])

    assert summary.results == []
    assert summary.ok


@pytest.mark.parametrize("payload", ["", b""])
@pytest.mark.parametrize("extension", [".scss", ".sass"])
def test_empty_stylesheet_compiles_to_empty_css(payload, extension):
    pipeline = Pipeline(registry=build_registry())

    result = pipeline.process(Asset(content=payload, extension=extension))

    assert result.extension == ".css"
    assert result.content == payload
    assert type(result.content) is type(payload)
    assert result.converted
