"""Command line interface for assetpipe."""
