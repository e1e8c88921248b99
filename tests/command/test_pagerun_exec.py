import json
import logging

import pytest
from click.testing import CliRunner

from pagerun.command import pagerun_exec
from pagerun.tool.tab import Tab


@pytest.fixture
def fake_session(monkeypatch, page_factory):
    pages = []

    class FakeSession:
        def __init__(self, config):
            self.config = config
            page = page_factory(url="about:blank", title="Blank")
            pages.append(page)
            self.tab = Tab(page)

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return None

    monkeypatch.setattr(pagerun_exec, "BrowserSession", FakeSession)
    monkeypatch.setattr(
        pagerun_exec,
        "setup_command_logger",
        lambda log_filename, verbose=False, log_config=None: logging.getLogger("pagerun.test"),
    )
    monkeypatch.setattr("pagerun.config.pagerun_config.load_dotenv", lambda *a, **k: False)
    monkeypatch.delenv("PAGERUN_CAPABILITIES", raising=False)
    monkeypatch.delenv("PAGERUN_LOG_LEVEL", raising=False)
    return pages


def test_run_code_prints_response(fake_session):
    result = CliRunner().invoke(pagerun_exec.run, ["--code", "return 1"])

    assert result.exit_code == 0, result.output
    assert "### Result\n1" in result.output
    assert "- Page Title: Blank" in result.output


def test_run_navigates_before_code(fake_session):
    result = CliRunner().invoke(
        pagerun_exec.run,
        ["--url", "https://example.com/", "--code", "return page.url"],
    )

    assert result.exit_code == 0, result.output
    assert '### Result\n"https://example.com/"' in result.output


def test_error_response_exits_nonzero(fake_session):
    result = CliRunner().invoke(pagerun_exec.run, ["--code", 'raise Exception("x")'])

    assert result.exit_code == 1
    assert "Error: x" in result.output


def test_json_output(fake_session):
    result = CliRunner().invoke(pagerun_exec.run, ["--json", "--code", "return [1, 2]"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["isError"] is False
    assert "[\n  1,\n  2\n]" in payload["content"][0]["text"]


def test_code_from_file_and_stdin(fake_session, tmp_path):
    script = tmp_path / "script.py"
    script.write_text("return 'from file'\n", encoding="utf-8")

    from_file = CliRunner().invoke(pagerun_exec.run, ["--file", str(script)])
    assert '"from file"' in from_file.output

    from_stdin = CliRunner().invoke(pagerun_exec.run, [], input="return 'from stdin'\n")
    assert '"from stdin"' in from_stdin.output


def test_code_and_file_are_exclusive(fake_session, tmp_path):
    script = tmp_path / "script.py"
    script.write_text("return 1", encoding="utf-8")

    result = CliRunner().invoke(pagerun_exec.run, ["--code", "return 1", "--file", str(script)])
    assert result.exit_code == 2
    assert "not both" in result.output


def test_list_tools(fake_session):
    result = CliRunner().invoke(pagerun_exec.run, ["--list-tools"])

    assert result.exit_code == 0, result.output
    tools = json.loads(result.output)
    assert [t["name"] for t in tools] == ["browser_playwright_code"]
    assert tools[0]["annotations"]["destructiveHint"] is True
    assert fake_session == []


def test_unknown_capability_is_usage_error(fake_session):
    result = CliRunner().invoke(pagerun_exec.run, ["--caps", "bogus", "--list-tools"])

    assert result.exit_code == 2
    assert "Unknown capability" in result.output


def test_invalid_log_level_is_usage_error(monkeypatch, fake_session):
    monkeypatch.setenv("PAGERUN_LOG_LEVEL", "chatty")
    result = CliRunner().invoke(pagerun_exec.run, ["--code", "return 1"])

    assert result.exit_code == 2
    assert "PAGERUN_LOG_LEVEL" in result.output
    assert not isinstance(result.exception, ValueError)
    assert fake_session == []


def test_unsupported_config_suffix_is_usage_error(fake_session, tmp_path):
    config_path = tmp_path / "pagerun.toml"
    config_path.write_text("headless = false\n", encoding="utf-8")
    result = CliRunner().invoke(pagerun_exec.run, ["--config", str(config_path), "--code", "return 1"])

    assert result.exit_code == 2
    assert "--config" in result.output
    assert not isinstance(result.exception, ValueError)
    assert fake_session == []


def test_session_failure_exits_with_message(monkeypatch, fake_session):
    class BrokenSession:
        def __init__(self, config):
            pass

        async def __aenter__(self):
            raise RuntimeError("Failed to launch browser automation.")

        async def __aexit__(self, exc_type, exc, tb):
            return None

    monkeypatch.setattr(pagerun_exec, "BrowserSession", BrokenSession)
    result = CliRunner().invoke(pagerun_exec.run, ["--code", "return 1"])

    assert result.exit_code == 2
    assert "Failed to launch browser automation." in result.output
