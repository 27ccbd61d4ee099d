from __future__ import annotations


class SkypostError(RuntimeError):
    """Base class for errors raised by skypost."""


class ConfigError(SkypostError):
    """Raised when configuration is missing or invalid."""


class HtmlImportError(SkypostError):
    """Raised when HTML input cannot be parsed into a post."""


class PublishError(SkypostError):
    """Raised by publishers when a post is rejected or cannot be delivered."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InputError(SkypostError):
    """Raised when an input document cannot be read."""
