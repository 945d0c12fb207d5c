"""CSS compressor backed by csscompressor, a port of the YUI compressor."""

from __future__ import annotations

import csscompressor

from assetpipe.capabilities.base import Capability, Content, as_text, like


def compress_css(content: Content) -> Content:
    text = as_text(content, capability="css")
    return like(content, csscompressor.compress(text))


CSS_COMPRESSOR = Capability.compressor("css", ".css", compress_css)
