"""Tests for result rendering and token redaction in the gl-members logger."""

import json
import logging

from gl_members.logging_utils import REDACTED, RedactingFilter, StructuredFormatter, setup_logging
from gl_members.models import ActionResult


def make_record(msg="message", level=logging.INFO, args=None, **extra):
    record = logging.LogRecord("gl-members", level, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_text_message(self):
        assert StructuredFormatter().format(make_record("hello")) == "[INFO   ] hello"

    def test_json_message(self):
        line = StructuredFormatter(json_mode=True).format(make_record("hello", logging.WARNING))
        assert json.loads(line) == {"level": "WARNING", "message": "hello"}

    def test_text_action_result(self):
        result = ActionResult("456", 7, "add-member:7", "applied", "access_level=guest, expires_at=never")

        line = StructuredFormatter().format(make_record(action_result=result))

        assert line == "[INFO   ] ✓ [group] 456: add-member:7 → applied (access_level=guest, expires_at=never)"

    def test_text_dry_run_result(self):
        result = ActionResult("456", 3, "remove-member:3", "would_apply", dry_run=True)

        line = StructuredFormatter().format(make_record(action_result=result))

        assert line == "[INFO   ] [DRY-RUN] ○ [group] 456: remove-member:3 → would_apply"

    def test_json_action_result(self):
        result = ActionResult("456", 1, "remove-member:1", "skipped", "owner access level")

        line = StructuredFormatter(json_mode=True).format(make_record(action_result=result))

        assert json.loads(line) == {
            "group": "456",
            "user_id": 1,
            "operation": "remove-member:1",
            "action": "skipped",
            "detail": "owner access level",
        }


class TestRedactingFilter:
    def test_token_is_masked(self):
        record = make_record("API error 401: token %s rejected", args=("glpat-secret",))

        assert RedactingFilter(["glpat-secret"]).filter(record) is True
        assert record.getMessage() == f"API error 401: token {REDACTED} rejected"

    def test_no_secrets_leaves_record_alone(self):
        record = make_record("value %s", args=("x",))

        RedactingFilter([""]).filter(record)

        assert record.args == ("x",)


class TestSetupLogging:
    def test_replaces_previous_handler(self):
        setup_logging()
        logger = setup_logging(json_mode=True, verbose=True, secrets=["t"])

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].formatter.json_mode is True
