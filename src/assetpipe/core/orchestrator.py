"""Two-stage convert-then-compress pipeline."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace

from assetpipe.capabilities import CapabilityRegistry
from assetpipe.core.asset import Asset
from assetpipe.errors import CompressionFailed, ConversionFailed, PipelineError, TransformError


@dataclass(slots=True)
class PipelineResult:
    """Outcome of processing one asset in a batch."""

    source: Asset
    asset: Asset | None = None
    error: PipelineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def degraded(self) -> bool:
        """True when a compression failure fell back to the converted content."""

        return self.error is not None and self.asset is not None


@dataclass(slots=True)
class BatchSummary:
    results: list[PipelineResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def degraded(self) -> int:
        return sum(1 for result in self.results if result.degraded)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if result.asset is None)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)


@dataclass(slots=True)
class Pipeline:
    """Run each asset through at most one converter, then at most one compressor."""

    registry: CapabilityRegistry
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def process(self, asset: Asset) -> Asset:
        """Convert then compress `asset`.

        Raises `ConversionFailed` (the compressor is then never consulted) or
        `CompressionFailed`, whose `asset` holds the converted but uncompressed
        content so the caller can decide whether to fall back to it.
        """

        converted = self._convert(asset)
        return self._compress(converted)

    def process_all(
        self,
        assets: Iterable[Asset],
        *,
        max_workers: int | None = None,
        fallback_on_compression_failure: bool = False,
    ) -> BatchSummary:
        """Process independent assets concurrently, preserving input order."""

        pending = list(assets)
        if not pending:
            return BatchSummary()

        def _run(asset: Asset) -> PipelineResult:
            try:
                return PipelineResult(source=asset, asset=self.process(asset))
            except CompressionFailed as exc:
                if fallback_on_compression_failure:
                    self.logger.warning(
                        "%s; keeping uncompressed %s output.", exc, exc.asset.extension
                    )
                    return PipelineResult(source=asset, asset=exc.asset, error=exc)
                self.logger.error("%s", exc)
                return PipelineResult(source=asset, error=exc)
            except ConversionFailed as exc:
                self.logger.error("%s", exc)
                return PipelineResult(source=asset, error=exc)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(_run, pending))

        summary = BatchSummary(results=results)
        self.logger.info(
            "Processed %s asset(s): %s succeeded, %s degraded, %s failed.",
            len(results),
            summary.succeeded,
            summary.degraded,
            summary.failed,
        )
        return summary

    def _convert(self, asset: Asset) -> Asset:
        converter = self.registry.find_converter(asset.extension)
        if converter is None:
            self.logger.debug(
                "No converter for %s; %s passes through.", asset.extension, _label(asset)
            )
            return asset

        try:
            content = converter.transform(asset.content)
        except TransformError as exc:
            raise ConversionFailed(asset, exc) from exc

        self.logger.debug(
            "Converted %s with %s (%s -> %s).",
            _label(asset),
            converter.name,
            asset.extension,
            converter.output_extension,
        )
        return replace(asset, content=content, extension=converter.output_extension, converted=True)

    def _compress(self, asset: Asset) -> Asset:
        compressor = self.registry.find_compressor(asset.extension)
        if compressor is None:
            self.logger.debug(
                "No compressor for %s; %s passes through.", asset.extension, _label(asset)
            )
            return asset

        try:
            content = compressor.transform(asset.content)
        except TransformError as exc:
            raise CompressionFailed(asset, exc) from exc

        self.logger.debug(
            "Compressed %s with %s (size %s -> %s).",
            _label(asset),
            compressor.name,
            len(asset.content),
            len(content),
        )
        return replace(asset, content=content, compressed=True)


def _label(asset: Asset) -> str:
    return asset.name or f"{asset.extension or 'extensionless'} asset"
