"""
slicestore Exceptions
=====================

Only ``UsageError`` is ever raised to a caller. Selector and listener failures
are contained where they happen, wrapped in ``SelectorEvaluationError`` or
``ListenerCallbackError`` and handed to ``slicestore.config.report_error``.
"""

from typing import Optional


class SliceStoreError(Exception):
    """Base class for every slicestore error."""

    pass


class _ContainedError(SliceStoreError):
    def __init__(
        self, message: str, cause: Optional[BaseException] = None, phase: str = ""
    ):
        super().__init__(message)
        self.cause = cause
        self.phase = phase
        self.__cause__ = cause


class SelectorEvaluationError(_ContainedError):
    """A selector raised while being evaluated (subscribe, dispatch or read)."""

    pass


class ListenerCallbackError(_ContainedError):
    """A notified listener raised."""

    pass


class UsageError(SliceStoreError):
    """The store or adapter was used without a store available, or after close."""

    pass
