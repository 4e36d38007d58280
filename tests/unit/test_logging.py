# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.
"""Unit tests for structured logging."""

import json
import logging
import uuid

from multitenant.core.logging import StructuredFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="multitenant.scope", level=logging.INFO, pathname=__file__,
        lineno=1, msg="applied to %s", args=("widgets",), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_basic_fields(self):
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["module"] == "multitenant.scope"
        assert entry["message"] == "applied to widgets"
        assert "tenants" not in entry

    def test_context_fields(self):
        org = uuid.uuid4()
        entry = json.loads(StructuredFormatter().format(
            _record(trace_id="t-1", tenants={"org_id": org}, model="Widget")
        ))
        assert entry["trace_id"] == "t-1"
        assert entry["tenants"] == {"org_id": str(org)}
        assert entry["model"] == "Widget"

    def test_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            import sys
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in entry["exception"]


class TestSetupLogging:
    def test_installs_single_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging("debug")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
