"""Contextual logging.

Thin wrapper around the standard library logger that carries structured
dimensions (tenant, scope, component, ...) through derived loggers.

Usage:
    from poslive.core.logging import logger

    registry_logger = logger.with_context(component="registry")
    registry_logger.info("Opened subscription")
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

_ROOT_LOGGER_NAME = "poslive"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that attaches context dimensions to every record.

    Dimensions are exposed on the log record as ``record.dimensions`` and
    rendered by ``ContextFormatter`` as ``key=value`` pairs.
    """

    def __init__(
        self,
        logger: logging.Logger,
        prefix: str = "",
        dimensions: Optional[dict[str, Any]] = None,
    ) -> None:
        """Wrap a stdlib logger with a prefix and context dimensions."""
        super().__init__(logger, {})
        self.prefix = prefix
        self.dimensions: dict[str, Any] = dict(dimensions or {})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """Prefix the message and merge dimensions into ``extra``."""
        extra = dict(kwargs.get("extra") or {})
        dimensions = {**self.dimensions, **extra.pop("dimensions", {})}
        extra["dimensions"] = dimensions
        kwargs["extra"] = extra
        if self.prefix:
            msg = f"{self.prefix}{msg}"
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional context dimensions."""
        return ContextualLogger(
            self.logger, prefix=self.prefix, dimensions={**self.dimensions, **dimensions}
        )

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a new logger whose messages start with ``prefix``."""
        return ContextualLogger(self.logger, prefix=prefix, dimensions=self.dimensions)


class ContextFormatter(logging.Formatter):
    """Formatter that appends context dimensions to the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if not dimensions:
            return base
        rendered = " ".join(f"{key}={value}" for key, value in sorted(dimensions.items()))
        return f"{base} [{rendered}]"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger (idempotent)."""
    base = logging.getLogger(_ROOT_LOGGER_NAME)
    base.setLevel(level.upper())
    if any(getattr(h, "_poslive_handler", False) for h in base.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ContextFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    handler._poslive_handler = True  # type: ignore[attr-defined]
    base.addHandler(handler)


logger = ContextualLogger(logging.getLogger(_ROOT_LOGGER_NAME))
