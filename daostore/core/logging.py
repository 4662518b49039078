"""Central logging configuration helpers for daostore."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping

from loguru import logger

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)


def _scope_matches(record_name: str, scope: str) -> bool:
    if record_name.startswith(scope):
        return True
    return not scope.startswith("daostore.") and record_name.startswith(
        f"daostore.{scope}"
    )


def configure_logging(
    level: str,
    *,
    debug_scopes: Iterable[str] = (),
    colorize: bool = False,
) -> tuple[int, ...]:
    """Configure loguru, optionally letting DEBUG through for selected modules.

    ``debug_scopes`` accepts module prefixes such as ``governance.proposals``
    or ``daostore.core.persistence``; DEBUG records from matching modules are
    emitted even when ``level`` is higher.
    """
    logger.remove()

    handler_ids: list[int] = [
        logger.add(
            sys.stderr,
            level=level,
            format=DEFAULT_LOG_FORMAT,
            colorize=colorize,
        )
    ]

    scopes = tuple(scope.strip() for scope in debug_scopes if scope.strip())
    if not scopes or level.upper() == "DEBUG":
        return tuple(handler_ids)

    def _debug_filter(record: object) -> bool:
        if not isinstance(record, Mapping):
            return False
        if getattr(record.get("level"), "name", None) != "DEBUG":
            return False
        record_name = record.get("name", "") or ""
        return any(_scope_matches(record_name, scope) for scope in scopes)

    handler_ids.append(
        logger.add(
            sys.stderr,
            level="DEBUG",
            format=DEFAULT_LOG_FORMAT,
            colorize=colorize,
            filter=_debug_filter,
        )
    )
    return tuple(handler_ids)
