"""
Tests for the fuco-config command line interface.
"""

import json
import os
from unittest.mock import patch

import pytest
import yaml

from fuco.cli import EXIT_CONFIG_ERROR, EXIT_OK, EXIT_PRODUCTION_ISSUES, main
from fuco.config.validation import PLACEHOLDER_JWT_SECRET


def run_cli(args, environ):
    with patch.dict(os.environ, environ, clear=True):
        return main(args)


class TestReportCommand:

    def test_development_report(self, project_dir, base_environ, write_env, capsys):
        write_env(".env", {"APP_HOST": "10.0.0.5"})

        code = run_cli(["--base-dir", str(project_dir), "report"], base_environ)
        out = capsys.readouterr().out

        assert code == EXIT_OK
        assert out.startswith("FUCO Production System - Configuration Report")
        assert "Server: 10.0.0.5:8847" in out
        assert "   [x] .env" in out
        assert "Production configuration" not in out

    def test_production_report_lists_issues(self, project_dir, production_environ, capsys):
        environ = {**production_environ, "CORS_ORIGIN": "http://localhost:3000"}

        code = run_cli(["--base-dir", str(project_dir), "report"], environ)
        out = capsys.readouterr().out

        assert code == EXIT_OK
        assert "Production configuration issues:" in out
        assert "loopback" in out


class TestValidateCommand:

    def test_not_production(self, project_dir, base_environ, capsys):
        code = run_cli(["--base-dir", str(project_dir), "validate"], base_environ)

        assert code == EXIT_OK
        assert "is not production, nothing to check" in capsys.readouterr().out

    def test_clean_production(self, project_dir, production_environ, capsys):
        code = run_cli(["--base-dir", str(project_dir), "validate"], production_environ)

        assert code == EXIT_OK
        assert "Production configuration check passed" in capsys.readouterr().out

    def test_placeholder_secret_fails(self, project_dir, production_environ, capsys):
        environ = {**production_environ, "JWT_SECRET": PLACEHOLDER_JWT_SECRET}

        code = run_cli(["--base-dir", str(project_dir), "validate"], environ)
        out = capsys.readouterr().out

        assert code == EXIT_PRODUCTION_ISSUES
        assert "placeholder" in out

    def test_missing_required_key(self, project_dir, base_environ, capsys):
        environ = {key: value for key, value in base_environ.items() if key != "JWT_SECRET"}

        code = run_cli(["--base-dir", str(project_dir), "validate"], environ)
        err = capsys.readouterr().err

        assert code == EXIT_CONFIG_ERROR
        assert "Configuration error:" in err
        assert "JWT_SECRET" in err


class TestExportCommand:

    def test_json_export_is_redacted(self, project_dir, production_environ, capsys):
        code = run_cli(["--base-dir", str(project_dir), "export"], production_environ)
        out = capsys.readouterr().out
        snapshot = json.loads(out)

        assert code == EXIT_OK
        assert snapshot["environment"] == "production"
        assert snapshot["server"]["jwt"]["secret"] == "[HIDDEN]"
        assert production_environ["JWT_SECRET"] not in out
        assert "db-password-42" not in out

    def test_yaml_export(self, project_dir, base_environ, write_json, capsys):
        write_json("fuco.config.json", {"plant": {"lines": 4}})

        code = run_cli(["--base-dir", str(project_dir), "export", "--format", "yaml"], base_environ)
        snapshot = yaml.safe_load(capsys.readouterr().out)

        assert code == EXIT_OK
        assert snapshot["custom"] == {"plant": {"lines": 4}}
        assert snapshot["logging"]["format"] == "simple"

    def test_unknown_format_rejected(self, project_dir, base_environ):
        with pytest.raises(SystemExit):
            run_cli(["--base-dir", str(project_dir), "export", "--format", "toml"], base_environ)


class TestLogLevelOption:

    def test_unknown_log_level_is_usage_error(self, project_dir, base_environ, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run_cli(["--base-dir", str(project_dir), "--log-level", "chatty", "report"], base_environ)

        assert exc_info.value.code == 2
        assert "Unknown log level: chatty" in capsys.readouterr().err

    def test_backend_alias_accepted(self, project_dir, base_environ, capsys):
        code = run_cli(["--base-dir", str(project_dir), "--log-level", "warn", "report"], base_environ)

        assert code == EXIT_OK
        assert "Configuration Report" in capsys.readouterr().out
