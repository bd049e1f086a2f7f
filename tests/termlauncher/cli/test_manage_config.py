"""Tests for the configuration management CLI."""

import json

import pytest
from click.testing import CliRunner

from termlauncher.cli.manage_config import cli
from termlauncher.releases.update_checker import UpdateStatus


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def mock_configure_structlog(mocker):
    """Keep the CLI from replacing the test run's logging handlers."""
    return mocker.patch("termlauncher.cli.manage_config.configure_structlog", autospec=True)


@pytest.fixture
def config_path(tmp_path):
    """Provide the path of the configuration file used by the CLI."""
    return tmp_path / "config.json"


@pytest.fixture
def invoke(runner, config_path):
    """Invoke the CLI against config_path on Windows."""

    def _invoke(*args):
        return runner.invoke(cli, ["--config", str(config_path), "--platform", "win32", *args])

    return _invoke


def _write(path, document):
    path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestMigrateCommand:
    """Test the migrate command."""

    def test_missing_file(self, invoke, config_path):
        """Should report that there is nothing to migrate."""
        result = invoke("migrate")

        assert result.exit_code == 0
        assert "nothing to migrate" in result.output
        assert not config_path.exists()

    def test_migrates_legacy_file(self, invoke, config_path, legacy_document):
        """Should rewrite a legacy file in the current format."""
        _write(config_path, legacy_document)

        result = invoke("migrate")

        assert result.exit_code == 0
        assert "✓ Configuration migrated successfully!" in result.output
        assert "Directories: 2" in result.output
        stored = _read(config_path)
        assert stored["groups"][0]["id"] == "default"
        assert stored["directories"][0]["terminalId"] == "wsl-ubuntu"

    def test_dry_run_does_not_write(self, invoke, config_path, legacy_document):
        """Should report pending changes without saving them."""
        _write(config_path, legacy_document)

        result = invoke("migrate", "--dry-run")

        assert result.exit_code == 0
        assert "Configuration would be migrated" in result.output
        assert _read(config_path) == legacy_document

    def test_up_to_date(self, invoke, config_path, canonical_document):
        """Should leave a canonical file alone."""
        _write(config_path, canonical_document)

        result = invoke("migrate")

        assert result.exit_code == 0
        assert "already up to date" in result.output

    def test_corrupted_file(self, invoke, config_path):
        """Should fail on a file that is not JSON."""
        config_path.write_text("{broken", encoding="utf-8")

        result = invoke("migrate")

        assert result.exit_code == 1
        assert "not valid JSON" in result.output


class TestValidateCommand:
    """Test the validate command."""

    def test_valid_payload(self, invoke):
        """Should accept a valid payload."""
        result = invoke("validate", "safeUrl", '"https://example.com"')

        assert result.exit_code == 0
        assert "✓ Valid safeUrl" in result.output

    def test_invalid_payload(self, invoke):
        """Should exit with an error for an invalid payload."""
        result = invoke("validate", "localeCode", '"zh_TW"')

        assert result.exit_code == 1
        assert "Invalid locale code format" in result.output

    def test_payload_must_be_json(self, invoke):
        """Should reject payload text that is not JSON."""
        result = invoke("validate", "string", "not-json")

        assert result.exit_code == 2
        assert "not valid JSON" in result.output

    def test_unknown_kind(self, invoke):
        """Should only offer the registered validators."""
        result = invoke("validate", "email", '"a@b.c"')

        assert result.exit_code == 2


class TestTransferCommands:
    """Test the export, import and preview commands."""

    def test_export(self, invoke, config_path, canonical_document, tmp_path):
        """Should write an export with every section."""
        _write(config_path, canonical_document)
        output = tmp_path / "export.json"

        result = invoke("export", str(output))

        assert result.exit_code == 0
        assert f"✓ Configuration exported to {output}" in result.output
        export = _read(output)
        assert export["version"] == "2.0"
        assert export["directories"] == canonical_document["directories"]
        assert "settings" in export

    def test_export_excluding_sections(self, invoke, config_path, canonical_document, tmp_path):
        """Should leave out sections turned off on the command line."""
        _write(config_path, canonical_document)
        output = tmp_path / "export.json"

        result = invoke("export", str(output), "--no-settings", "--no-favorites")

        assert result.exit_code == 0
        export = _read(output)
        assert "settings" not in export
        assert "favorites" not in export

    def test_import_merges(self, invoke, config_path, canonical_document, tmp_path):
        """Should merge an export and save the result."""
        _write(config_path, canonical_document)
        source = tmp_path / "import.json"
        _write(
            source,
            {
                "directories": [
                    {"id": 9, "name": "new", "path": "/srv/new", "group": "nowhere"},
                ],
                "favorites": [9],
            },
        )

        result = invoke("import", str(source))

        assert result.exit_code == 0
        assert "✓ Configuration imported successfully!" in result.output
        assert 'Warning: Group "nowhere" not found' in result.output
        stored = _read(config_path)
        new = stored["directories"][-1]
        assert new["path"] == "/srv/new"
        assert new["id"] == 3
        assert new["group"] == "default"
        assert stored["favorites"] == [3]

    def test_import_replace_flag(self, invoke, config_path, canonical_document, tmp_path):
        """Should replace a section when asked to."""
        _write(config_path, canonical_document)
        source = tmp_path / "import.json"
        _write(source, {"directories": [{"id": 1, "path": "/only"}]})

        result = invoke("import", str(source), "--replace-directories")

        assert result.exit_code == 0
        assert [d["path"] for d in _read(config_path)["directories"]] == ["/only"]

    def test_import_rejects_non_mapping(self, invoke, config_path, canonical_document, tmp_path):
        """Should fail when the file is not an export document."""
        _write(config_path, canonical_document)
        source = tmp_path / "import.json"
        _write(source, ["not", "an", "export"])

        result = invoke("import", str(source))

        assert result.exit_code == 1
        assert "Invalid import data format" in result.output
        assert _read(config_path) == canonical_document

    def test_preview(self, invoke, config_path, canonical_document):
        """Should print the export counts."""
        _write(config_path, canonical_document)

        result = invoke("preview")

        assert result.exit_code == 0
        assert "Terminals: 4" in result.output
        assert "Groups: 1" in result.output
        assert "Directories: 2" in result.output
        assert "Settings: yes" in result.output


class TestCheckUpdateCommand:
    """Test the check-update command."""

    @pytest.fixture
    def mock_check(self, mocker):
        """Patch the update check used by the CLI."""
        return mocker.patch("termlauncher.cli.manage_config.check_for_updates", autospec=True)

    def test_update_available(self, invoke, mock_check):
        """Should print the newer release."""
        mock_check.return_value = UpdateStatus(
            has_update=True,
            current_version="2.3.0",
            latest_version="2.4.0",
            release_url="https://github.com/xjin9612/TermLauncher/releases/tag/v2.4.0",
        )

        result = invoke("check-update", "2.3.0")

        assert result.exit_code == 0
        assert "Update available: 2.4.0" in result.output
        mock_check.assert_called_once_with("2.3.0", github_repo="xjin9612/TermLauncher")

    def test_up_to_date(self, invoke, mock_check):
        """Should say the build is current."""
        mock_check.return_value = UpdateStatus(
            has_update=False, current_version="2.4.0", latest_version="2.4.0"
        )

        result = invoke("check-update", "2.4.0")

        assert result.exit_code == 0
        assert "TermLauncher 2.4.0 is up to date" in result.output

    def test_json_output(self, invoke, mock_check):
        """Should print the status as JSON."""
        mock_check.return_value = UpdateStatus(
            has_update=False, current_version="2.3.0", error="timeout"
        )

        result = invoke("check-update", "2.3.0", "--output-json")

        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "timeout"
