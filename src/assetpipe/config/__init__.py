"""Configuration utilities for assetpipe."""

from .loader import Config, OutputSettings, PipelineSettings, load_config

__all__ = ["Config", "OutputSettings", "PipelineSettings", "load_config"]
