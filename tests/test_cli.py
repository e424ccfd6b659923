"""
Tests for the command-line entry point.

Only the paths that end before any child is spawned are exercised.
"""

import logging

import pytest

from mcp_aggregator import cli
from mcp_aggregator.logging_utils import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


class TestParseArgs:
    def test_defaults(self):
        args = cli.parse_args(["--config", "servers.json"])
        assert args.config == "servers.json"
        assert args.separator == ":"
        assert args.debug is False
        assert args.log_file is None
        assert args.name == "mcp-aggregator"

    def test_all_options(self):
        args = cli.parse_args([
            "--config", "servers.yaml",
            "--debug",
            "--log-file", "/tmp/agg.log",
            "--name", "combined",
            "--server-version", "2.0.0",
            "--separator", "__",
        ])
        assert args.debug is True
        assert args.log_file == "/tmp/agg.log"
        assert args.name == "combined"
        assert args.server_version == "2.0.0"
        assert args.separator == "__"

    def test_config_required(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args([])
        assert exc_info.value.code == 2

    def test_empty_config_rejected(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["--config", "  "])


class TestMain:
    def test_missing_config_file(self, tmp_path, capsys):
        code = cli.main(["--config", str(tmp_path / "missing.json")])

        assert code == 1
        err = capsys.readouterr().err
        assert err.startswith("Fatal error: Config file not found")

    def test_invalid_separator(self, tmp_path, capsys):
        code = cli.main(["--config", str(tmp_path / "servers.json"), "--separator", "a b"])

        assert code == 1
        assert "whitespace" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "servers.json"
        path.write_text('{"mcpServers": {}}')

        assert cli.main(["--config", str(path)]) == 1
        assert "at least one server" in capsys.readouterr().err

    def test_startup_failure(self, tmp_path, capsys):
        path = tmp_path / "servers.json"
        path.write_text('{"mcpServers": {"ghost": {"command": "definitely-not-a-real-command-7f3a"}}}')

        assert cli.main(["--config", str(path)]) == 1
        assert "Fatal error: Failed to start child server 'ghost'" in capsys.readouterr().err

    def test_nothing_written_to_stdout(self, tmp_path, capsys):
        cli.main(["--config", str(tmp_path / "missing.json"), "--debug", "--log-file", str(tmp_path / "a.log")])
        assert capsys.readouterr().out == ""
