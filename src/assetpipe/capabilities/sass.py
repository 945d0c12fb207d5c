"""Sass stylesheet converters backed by libsass."""

from __future__ import annotations

import sass

from assetpipe.capabilities.base import Capability, Content, as_text, like
from assetpipe.errors import TransformError

OUTPUT_STYLE = "nested"


def _compile(content: Content, *, capability: str, indented: bool) -> Content:
    source = as_text(content, capability=capability)
    if not source:
        # libsass refuses an empty data context.
        return like(content, "")
    try:
        css = sass.compile(string=source, output_style=OUTPUT_STYLE, indented=indented)
    except sass.CompileError as exc:
        raise TransformError(capability, str(exc).strip()) from exc
    return like(content, css)


def compile_scss(content: Content) -> Content:
    """Compile SCSS syntax to plain CSS."""

    return _compile(content, capability="scss", indented=False)


def compile_sass(content: Content) -> Content:
    """Compile the indented Sass syntax to plain CSS."""

    return _compile(content, capability="sass", indented=True)


SCSS_CONVERTER = Capability.converter("scss", ".scss", ".css", compile_scss)
SASS_CONVERTER = Capability.converter("sass", ".sass", ".css", compile_sass)
