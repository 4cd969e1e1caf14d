"""
Tests for configuration sources.
"""

import pytest
import yaml

from fuco.config import (
    DotEnvConfigurationSource,
    EnvironmentConfigurationSource,
    StructuredFileConfigurationSource
)
from fuco.infrastructure.exceptions import ConfigFileWarning


class TestEnvironmentSource:

    def test_snapshot_of_injected_mapping(self):
        environ = {"APP_PORT": "8847"}
        source = EnvironmentConfigurationSource(environ)

        data = source.load()
        environ["APP_PORT"] = "9000"

        assert data == {"APP_PORT": "8847"}
        assert source.get_priority() == 700

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("FUCO_TEST_MARKER", "present")
        assert EnvironmentConfigurationSource().load()["FUCO_TEST_MARKER"] == "present"


class TestDotEnvSource:

    def test_parses_lines(self, project_dir):
        path = project_dir / ".env"
        path.write_text(
            "# database settings\n"
            "\n"
            "DB_HOST=db.internal\n"
            'DB_NAME="fuco line"\n'
            "DB_USER='operator'\n"
            "DB_OPTIONS=sslmode=require\n",
            encoding="utf-8"
        )

        data = DotEnvConfigurationSource(path, 400).load()

        assert data == {
            "DB_HOST": "db.internal",
            "DB_NAME": "fuco line",
            "DB_USER": "operator",
            "DB_OPTIONS": "sslmode=require",
        }

    def test_no_interpolation(self, project_dir):
        path = project_dir / ".env"
        path.write_text("GREETING=${HOME}/logs\n", encoding="utf-8")

        assert DotEnvConfigurationSource(path, 400).load()["GREETING"] == "${HOME}/logs"

    def test_values_kept_literally(self, project_dir):
        path = project_dir / ".env"
        path.write_text(
            "JWT_SECRET=abc #def\n"
            'BANNER="line\\nbreak"\n'
            "CORS_ORIGIN='http://a,http://b'\n",
            encoding="utf-8"
        )

        data = DotEnvConfigurationSource(path, 400).load()

        assert data["JWT_SECRET"] == "abc #def"
        assert data["BANNER"] == "line\\nbreak"
        assert data["CORS_ORIGIN"] == "http://a,http://b"

    def test_unmatched_quote_kept(self, project_dir):
        path = project_dir / ".env"
        path.write_text('DB_NAME="fuco\nDB_USER=operator\n', encoding="utf-8")

        data = DotEnvConfigurationSource(path, 400).load()

        assert data == {"DB_NAME": '"fuco', "DB_USER": "operator"}

    def test_first_non_empty_value_wins(self, project_dir):
        path = project_dir / ".env"
        path.write_text("LOG_LEVEL=\nLOG_LEVEL=debug\nLOG_LEVEL=info\n", encoding="utf-8")

        assert DotEnvConfigurationSource(path, 400).load() == {"LOG_LEVEL": "debug"}

    def test_lines_without_key_ignored(self, project_dir):
        path = project_dir / ".env"
        path.write_text("=orphan\nJUST_A_WORD\n   # indented comment\nAPP_PORT = 8847 \n", encoding="utf-8")

        assert DotEnvConfigurationSource(path, 400).load() == {"APP_PORT": "8847"}

    def test_missing_file_is_empty(self, project_dir):
        assert DotEnvConfigurationSource(project_dir / ".env.missing", 400).load() == {}

    def test_undecodable_file_raises_warning(self, project_dir):
        path = project_dir / ".env"
        path.write_bytes(b"KEY=\xff\xfe\xfa\n")

        with pytest.raises(ConfigFileWarning) as exc_info:
            DotEnvConfigurationSource(path, 400).load()

        assert exc_info.value.file_path == str(path)


class TestStructuredFileSource:

    def test_json_file(self, write_json):
        path = write_json("fuco.config.json", {"plant": {"lines": 4}})
        source = StructuredFileConfigurationSource(path, 300)

        assert source.load() == {"plant": {"lines": 4}}
        assert source.get_priority() == 300
        assert source.describe() == str(path)

    def test_yaml_file(self, project_dir):
        path = project_dir / "extra.yaml"
        path.write_text(yaml.safe_dump({"plant": {"shift": "night"}}), encoding="utf-8")

        assert StructuredFileConfigurationSource(path, 350).load() == {"plant": {"shift": "night"}}

    def test_empty_file_is_empty_mapping(self, project_dir):
        path = project_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert StructuredFileConfigurationSource(path, 350).load() == {}

    def test_missing_file_is_empty(self, project_dir):
        assert StructuredFileConfigurationSource(project_dir / "config" / "default.json", 100).load() == {}

    def test_invalid_json_raises_warning(self, project_dir):
        path = project_dir / "fuco.config.json"
        path.write_text("{not valid json", encoding="utf-8")

        with pytest.raises(ConfigFileWarning, match="Unable to parse"):
            StructuredFileConfigurationSource(path, 300).load()

    def test_non_mapping_root_raises_warning(self, write_json):
        path = write_json("fuco.config.json", [1, 2, 3])

        with pytest.raises(ConfigFileWarning, match="must be a mapping"):
            StructuredFileConfigurationSource(path, 300).load()
