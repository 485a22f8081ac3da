"""
Tests for the main CLI entry point.
"""

from unittest.mock import ANY, patch

import pytest
import yaml

from voxsync import __version__
from voxsync.cli.main import cli

pytestmark = pytest.mark.cli


@pytest.fixture
def cli_config(temp_dir, recordings_dir):
    path = temp_dir / "voxsync.yaml"
    path.write_text(
        yaml.dump(
            {
                "storage": {"recordings_dir": str(recordings_dir)},
                "logging": {"level": "WARNING"},
            }
        )
    )
    return path


class TestMainCLI:
    """Test the main CLI entry point."""

    def test_cli_help(self, cli_runner):
        """Test main CLI help output."""
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Offline-first upload of local audio recordings" in result.output
        assert "Commands:" in result.output
        for command in ["status", "sync", "watch", "retry", "delete", "config"]:
            assert command in result.output

    def test_cli_version(self, cli_runner):
        """Test version option."""
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_verbose_flag(self, cli_runner, cli_config):
        """Test verbose flag selects debug logging."""
        with patch("voxsync.cli.main.configure_logging") as mock_logging:
            result = cli_runner.invoke(cli, ["-c", str(cli_config), "--verbose", "status"])
            assert result.exit_code == 0
            mock_logging.assert_called_once_with(ANY, verbose=True, quiet=False)

    def test_cli_quiet_flag(self, cli_runner, cli_config):
        """Test quiet flag only logs errors."""
        with patch("voxsync.cli.main.configure_logging") as mock_logging:
            result = cli_runner.invoke(cli, ["-c", str(cli_config), "--quiet", "status"])
            assert result.exit_code == 0
            mock_logging.assert_called_once_with(ANY, verbose=False, quiet=True)

    def test_cli_uses_configured_level(self, cli_runner, cli_config):
        with patch("voxsync.cli.main.configure_logging") as mock_logging:
            result = cli_runner.invoke(cli, ["-c", str(cli_config), "status"])
            assert result.exit_code == 0
            mock_logging.assert_called_once_with(ANY, verbose=False, quiet=False)
            logging_config = mock_logging.call_args.args[0]
            assert logging_config.level == "WARNING"
            assert logging_config.file is None

    def test_cli_missing_config_file(self, cli_runner):
        result = cli_runner.invoke(cli, ["-c", "/nonexistent/voxsync.yaml", "status"])
        assert result.exit_code != 0
        assert "does not exist" in result.output

    def test_unknown_command(self, cli_runner):
        result = cli_runner.invoke(cli, ["upload-everything"])
        assert result.exit_code != 0
        assert "No such command" in result.output
