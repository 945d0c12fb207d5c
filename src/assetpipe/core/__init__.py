"""Core pipeline components for assetpipe."""

from .asset import Asset, AssetState
from .orchestrator import BatchSummary, Pipeline, PipelineResult

__all__ = ["Asset", "AssetState", "BatchSummary", "Pipeline", "PipelineResult"]
