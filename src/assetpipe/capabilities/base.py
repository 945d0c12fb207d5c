"""Capability declarations for the asset pipeline."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from assetpipe.errors import TransformError

Content = str | bytes
TransformFunc = Callable[[Content], Content]


class CapabilityKind(str, Enum):
    CONVERTER = "converter"
    COMPRESSOR = "compressor"


def _check_extension(value: str, *, label: str) -> str:
    if not isinstance(value, str) or len(value) < 2 or not value.startswith("."):
        raise ValueError(f"{label} must be an extension with a leading dot, got {value!r}.")
    return value


@dataclass(frozen=True, slots=True)
class Capability:
    """One transformation bound to the single extension it handles.

    Converters declare the extension their output is in; compressors keep the
    extension they handle. The wrapped function must be pure: capabilities are
    shared across threads and never hold per-call state.
    """

    name: str
    kind: CapabilityKind
    handled_extension: str
    transform_func: TransformFunc
    target_extension: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Capabilities must be named.")
        _check_extension(self.handled_extension, label="handled_extension")
        if self.kind is CapabilityKind.CONVERTER:
            if self.target_extension is None:
                raise ValueError(f"Converter {self.name} must declare a target extension.")
            _check_extension(self.target_extension, label="target_extension")
            if self.target_extension == self.handled_extension:
                raise ValueError(
                    f"Converter {self.name} must change the extension; "
                    f"use a compressor for {self.handled_extension} -> {self.handled_extension}."
                )
        elif self.target_extension not in (None, self.handled_extension):
            raise ValueError(f"Compressor {self.name} cannot change the extension.")

    @classmethod
    def converter(cls, name: str, handled: str, target: str, func: TransformFunc) -> Capability:
        return cls(
            name=name,
            kind=CapabilityKind.CONVERTER,
            handled_extension=handled,
            target_extension=target,
            transform_func=func,
        )

    @classmethod
    def compressor(cls, name: str, handled: str, func: TransformFunc) -> Capability:
        return cls(
            name=name,
            kind=CapabilityKind.COMPRESSOR,
            handled_extension=handled,
            transform_func=func,
        )

    @property
    def output_extension(self) -> str:
        """Extension of the content `transform` returns."""

        return self.target_extension or self.handled_extension

    def transform(self, content: Content) -> Content:
        """Run the wrapped function, reporting any failure as a `TransformError`."""

        try:
            result = self.transform_func(content)
        except TransformError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            raise TransformError(self.name, str(exc) or type(exc).__name__) from exc

        if not isinstance(result, (str, bytes)):
            raise TransformError(
                self.name, f"returned {type(result).__name__}, expected str or bytes"
            )
        return result


def as_text(content: Content, *, capability: str) -> str:
    """Decode byte payloads as UTF-8 for text-based engines."""

    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TransformError(capability, f"input is not valid UTF-8 ({exc.reason})") from exc


def like(original: Content, text: str) -> Content:
    """Return `text` in the same payload type as `original`."""

    if isinstance(original, bytes):
        return text.encode("utf-8")
    return text


__all__ = ["Capability", "CapabilityKind", "Content", "TransformFunc", "as_text", "like"]
