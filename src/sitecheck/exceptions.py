"""Shared exceptions for the sitecheck package."""

from __future__ import annotations


class SitecheckError(Exception):
    """Base class for sitecheck errors."""


class SetupError(SitecheckError):
    """Raised when the static server or the browser cannot be started.

    Setup failures abort the whole run before any scenario executes.
    """


class RenderError(SitecheckError):
    """Raised when both the browser render and the plain fetch failed for a URL."""

    def __init__(
        self, url: str, primary_error: BaseException, fallback_error: BaseException
    ) -> None:
        self.url = url
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"Failed to render {url}: browser error: {primary_error!r}; "
            f"fetch error: {fallback_error!r}"
        )


class CheckFailed(AssertionError):
    """A page did not have the expected shape."""


class BaselineMismatch(CheckFailed):
    """A recorded table-count baseline no longer matches the rendered page."""

    def __init__(self, identifier: str, expected: int | None, actual: int) -> None:
        self.identifier = identifier
        self.expected = expected
        self.actual = actual
        if expected is None:
            message = (
                f"No table-count baseline recorded for {identifier} (found {actual}). "
                "Run with --update-baselines to accept it."
            )
        else:
            message = (
                f"Table count for {identifier} changed: expected {expected}, found {actual}. "
                "Run with --update-baselines to accept the new count."
            )
        super().__init__(message)
