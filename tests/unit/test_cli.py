"""Tests for the click CLI and the main.run bootstrap."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from clean_framework.cli import main
from clean_framework.main import run


@pytest.fixture
def fast_env(monkeypatch):
    monkeypatch.setenv("CLEAN_FRAMEWORK_DEMO__TICK_INTERVAL_SECONDS", "0.01")
    monkeypatch.setenv("CLEAN_FRAMEWORK_DEMO__GREETING_DELAY_SECONDS", "0")


class TestDemoCommand:
    def test_demo_prints_state(self, fast_env):
        result = CliRunner().invoke(
            main, ["demo", "--name", "Ada", "--ticks", "2", "--log-level", "WARNING"]
        )
        assert result.exit_code == 0, result.output
        assert "Greeting: Hello, Ada!" in result.output
        assert "Ticks:    2" in result.output

    def test_demo_reports_failure(self, fast_env):
        result = CliRunner().invoke(
            main, ["demo", "--name", " ", "--ticks", "1", "--log-level", "WARNING"]
        )
        assert result.exit_code == 1
        assert "name is required" in result.output

    def test_demo_reads_config(self, fast_env, tmp_path):
        config = tmp_path / "demo.toml"
        config.write_text("[demo]\nticks = 3\n\n[observability]\nlog_level = \"ERROR\"\n")

        result = CliRunner().invoke(main, ["demo", "--config", str(config)])
        assert result.exit_code == 0, result.output
        assert "Ticks:    3" in result.output


class TestRun:
    @pytest.mark.asyncio
    async def test_run_returns_final_output(self, fast_env):
        output = await run(
            overrides={"demo": {"ticks": 2}, "observability": {"log_level": "WARNING"}},
            name="Grace",
        )
        assert output.greeting == "Hello, Grace!"
        assert output.tick_count == 2
        assert output.error == ""

    @pytest.mark.asyncio
    async def test_run_zero_ticks_reports_error(self, fast_env):
        output = await run(
            overrides={"demo": {"ticks": 0}, "observability": {"log_level": "WARNING"}},
        )
        assert output.tick_count == 0
        assert output.error.startswith("Subscription could not be established")
