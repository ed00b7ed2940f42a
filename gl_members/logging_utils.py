"""Logging utilities for gl-members."""

from __future__ import annotations

import json
import logging
import sys
from typing import Iterable

REDACTED = "***REDACTED***"

ACTION_ICONS = {
    "applied": "✓",
    "already_set": "·",
    "skipped": "→",
    "would_apply": "○",
}


class StructuredFormatter(logging.Formatter):
    """Renders membership results and plain messages as text or JSON lines."""

    def __init__(self, json_mode: bool = False):
        super().__init__()
        self.json_mode = json_mode

    def format(self, record: logging.LogRecord) -> str:
        result = getattr(record, "action_result", None)
        if result is not None:
            return json.dumps(result.to_dict()) if self.json_mode else self._format_result(record, result)
        if self.json_mode:
            return json.dumps({"level": record.levelname, "message": record.getMessage()})
        return f"[{record.levelname:<7}] {record.getMessage()}"

    @staticmethod
    def _format_result(record: logging.LogRecord, result) -> str:
        prefix = "[DRY-RUN] " if result.dry_run else ""
        icon = ACTION_ICONS.get(result.action, "?")
        detail = f" ({result.detail})" if result.detail else ""
        return (
            f"[{record.levelname:<7}] {prefix}{icon} [group] {result.group}: "
            f"{result.operation} → {result.action}{detail}"
        )


class RedactingFilter(logging.Filter):
    """Masks secrets (the API token) in log messages, e.g. echoed API error bodies."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if self.secrets:
            message = record.getMessage()
            for secret in self.secrets:
                message = message.replace(secret, REDACTED)
            record.msg = message
            record.args = None
        return True


def setup_logging(json_mode: bool = False, verbose: bool = False, secrets: Iterable[str] = ()) -> logging.Logger:
    logger = logging.getLogger("gl-members")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(json_mode=json_mode))
    handler.addFilter(RedactingFilter(secrets))
    logger.addHandler(handler)
    return logger
