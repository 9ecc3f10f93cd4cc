"""Error taxonomy for docsite pipelines."""

from __future__ import annotations


class DocsiteError(RuntimeError):
    """Base class for all docsite failures."""


class ExtractionError(DocsiteError):
    """Raised when a single source file cannot be parsed; the batch continues."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class RenderError(DocsiteError):
    """Raised when Markdown rendering fails."""


class ConfigurationError(DocsiteError):
    """Raised when configuration is invalid or a plugin cannot be loaded."""


class OutputCollisionError(DocsiteError):
    """Raised when two document nodes resolve to the same output path."""

    def __init__(self, path: str, first: str | None, second: str | None) -> None:
        super().__init__(
            f"Output path '{path}' produced by both {first or '<unknown>'} and {second or '<unknown>'}"
        )
        self.path = path
        self.first = first
        self.second = second


__all__ = [
    "ConfigurationError",
    "DocsiteError",
    "ExtractionError",
    "OutputCollisionError",
    "RenderError",
]
