"""Tests for logging setup and trace id propagation."""

import asyncio
import json
import logging

import pytest

from clean_framework.observability.logger import (
    get_trace_id,
    new_trace_id,
    set_trace_id,
    setup_logging,
)


class TestTraceId:
    def test_set_and_get(self):
        set_trace_id("abc")
        assert get_trace_id() == "abc"

    def test_new_trace_id_changes(self):
        first = new_trace_id()
        assert new_trace_id() != first

    @pytest.mark.asyncio
    async def test_task_trace_id_does_not_leak(self):
        set_trace_id("outer")

        async def child():
            return new_trace_id()

        inner = await asyncio.create_task(child())
        assert inner != "outer"
        assert get_trace_id() == "outer"


class TestSetupLogging:
    def test_json_output_includes_trace_id(self, capsys):
        setup_logging(level="INFO", format="json")
        set_trace_id("trace-1")

        logging.getLogger("clean_framework.test").info("hello %s", "world")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "hello world"
        assert record["trace_id"] == "trace-1"
        assert record["level"] == "info"

    def test_level_filters(self, capsys):
        setup_logging(level="WARNING", format="json")
        logging.getLogger("clean_framework.test").info("hidden")
        assert "hidden" not in capsys.readouterr().err
