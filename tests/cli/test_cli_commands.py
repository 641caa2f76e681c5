"""
Test the ziprelay command line interface
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ziprelay import __version__
from ziprelay.cli.main import cli

CONFIG_TEMPLATE = """
source:
  source_dir: {incoming}
  archive_dir: {archive}
  failed_dir: {failed}
  min_file_age_ms: 0
destination:
  bucket: test-bucket
  prefix_base: landing
processing:
  timeout_buffer_ms: 5000
  upload_retry_attempts: 1
  retry_wait_seconds: 0
logging:
  level: CRITICAL
"""


@pytest.fixture
def config_file(tmp_path, relay_dirs):
    path = tmp_path / "ziprelay.yaml"
    path.write_text(
        CONFIG_TEMPLATE.format(
            incoming=relay_dirs["incoming"],
            archive=relay_dirs["archive"],
            failed=relay_dirs["failed"],
        )
    )
    return path


def invoke_run(store, *args):
    runner = CliRunner()
    with patch("ziprelay.cli.commands.run.S3ObjectStore.from_config", return_value=store):
        return runner.invoke(cli, ["--no-color", "run", *args])


def test_cli_help():
    """Test main CLI help display"""
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Zip archive relay" in result.output
    assert "run" in result.output
    assert "config" in result.output


def test_cli_version():
    """Test CLI version display"""
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_run_help():
    result = CliRunner().invoke(cli, ["run", "--help"])

    assert result.exit_code == 0
    assert "--time-budget" in result.output
    assert "--no-fail-exit" in result.output


class TestRunCommand:
    """Test one invocation through the CLI."""

    def test_run_json_output(self, config_file, relay_dirs, store, zip_factory):
        zip_factory(relay_dirs["incoming"] / "a.zip", {"1.xml": "<a/>", "2.xml": "<b/>"})

        result = invoke_run(store, "--config", str(config_file), "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["zips_processed"] == 1
        assert data["total_files_uploaded"] == 2
        assert data["stopped_early"] is False
        assert (relay_dirs["archive"] / "a.zip").exists()
        assert len(store.objects) == 2

    def test_run_table_output(self, config_file, relay_dirs, store, zip_factory):
        zip_factory(relay_dirs["incoming"] / "a.zip", {"1.xml": "<a/>"})

        result = invoke_run(store, "--config", str(config_file))

        assert result.exit_code == 0, result.output
        assert "Invocation Summary" in result.output
        assert "Archives processed" in result.output

    def test_failed_archive_exit_code(self, config_file, relay_dirs, store, zip_factory):
        (relay_dirs["incoming"] / "bad.zip").write_bytes(b"not a zip")

        result = invoke_run(store, "--config", str(config_file))

        assert result.exit_code == 2
        assert "Failed Archives" in result.output
        assert (relay_dirs["failed"] / "bad.zip").exists()

    def test_no_fail_exit(self, config_file, relay_dirs, store, zip_factory):
        (relay_dirs["incoming"] / "bad.zip").write_bytes(b"not a zip")

        result = invoke_run(store, "--config", str(config_file), "--no-fail-exit", "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["zips_failed"] == 1

    def test_time_budget_below_buffer_stops_early(
        self, config_file, relay_dirs, store, zip_factory
    ):
        zip_factory(relay_dirs["incoming"] / "a.zip", {"1.xml": "<a/>"})

        result = invoke_run(store, "--config", str(config_file), "--time-budget", "1", "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["stopped_early"] is True
        assert data["zips_processed"] == 0
        assert (relay_dirs["incoming"] / "a.zip").exists()

    def test_missing_config(self, tmp_path, store):
        result = invoke_run(store, "--config", str(tmp_path / "absent.yaml"))

        assert result.exit_code == 1
        assert "Configuration Error" in result.output


class TestConfigCommands:
    """Test config init and validate."""

    def test_init_then_validate(self, tmp_path):
        path = tmp_path / "generated.yaml"
        runner = CliRunner()

        init = runner.invoke(cli, ["--no-color", "config", "init", str(path)])
        assert init.exit_code == 0, init.output
        assert path.exists()

        validate = runner.invoke(cli, ["--no-color", "config", "validate", str(path)])
        assert validate.exit_code == 0, validate.output
        assert "destination.bucket" in validate.output
        assert "Configuration is valid" in validate.output

    def test_init_refuses_existing_file(self, config_file):
        result = CliRunner().invoke(cli, ["--no-color", "config", "init", str(config_file)])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_validate_reports_errors(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("destination:\n  bucket: x\n")

        result = CliRunner().invoke(cli, ["--no-color", "config", "validate", str(path)])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output
