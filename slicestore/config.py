"""
slicestore Configuration
========================

Diagnostics settings and the single error-reporting path.

A lazily-created module-level config is read from the environment on first
access, the same way the package keeps other process-wide state:

- ``SLICESTORE_LOG_ERRORS``: log contained selector/listener failures (default on)
- ``SLICESTORE_CHECK_SNAPSHOTS``: double-read snapshot check in
  ``ExternalStoreBinding.read`` (default on)

Components take an explicit ``config=`` argument and fall back to
``get_config()`` when it is None.
"""

import dataclasses
import logging
import os
from typing import Callable, Optional

from .exceptions import SliceStoreError

logger = logging.getLogger(__name__)


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SliceStoreConfig:
    """
    Diagnostics configuration.

    Attributes:
        log_errors: Log contained selector and listener failures at ERROR.
        check_snapshot_stability: Warn when a snapshot slot returns a different
            object on two consecutive calls within one read.
        error_handler: Called with every contained ``SelectorEvaluationError``
            or ``ListenerCallbackError``.
    """

    log_errors: bool = True
    check_snapshot_stability: bool = True
    error_handler: Optional[Callable[[SliceStoreError], None]] = None

    @classmethod
    def from_env(cls) -> "SliceStoreConfig":
        return cls(
            log_errors=_env_bool(os.environ.get("SLICESTORE_LOG_ERRORS"), True),
            check_snapshot_stability=_env_bool(
                os.environ.get("SLICESTORE_CHECK_SNAPSHOTS"), True
            ),
        )


_config: Optional[SliceStoreConfig] = None


def get_config() -> SliceStoreConfig:
    """Get or create the process-wide config (read from the environment once)."""
    global _config
    if _config is None:
        _config = SliceStoreConfig.from_env()
    return _config


def configure(**overrides) -> SliceStoreConfig:
    """Replace fields of the process-wide config and return the new config."""
    global _config
    _config = dataclasses.replace(get_config(), **overrides)
    return _config


def _reset_config() -> None:
    """Reset the process-wide config for testing purposes."""
    global _config
    _config = None


def report_error(
    error: SliceStoreError, config: Optional[SliceStoreConfig] = None
) -> None:
    """
    Report a contained failure. Never raises.

    The error is logged (with the original traceback) when ``log_errors`` is
    set, then passed to ``error_handler`` if one is configured.
    """
    config = config or get_config()
    if config.log_errors:
        cause = getattr(error, "cause", None)
        exc_info = None
        if cause is not None:
            exc_info = (type(cause), cause, cause.__traceback__)
        logger.error("%s: %s", type(error).__name__, error, exc_info=exc_info)

    if config.error_handler is not None:
        try:
            config.error_handler(error)
        except Exception:
            logger.exception("error_handler failed while reporting %r", error)
