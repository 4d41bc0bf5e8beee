"""CLI tests using typer's CliRunner."""
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from i18n_scanner.config import __version__
from i18n_scanner.main import app, collect_files

runner = CliRunner()

FIXTURES_DIR = Path(__file__).parent / "fixtures"
APP_DIR = FIXTURES_DIR / "app"


@pytest.fixture(autouse=True)
def isolated_env(clean_env):
    return clean_env


def test_collect_files(tmp_path):
    (tmp_path / "vendor" / "gems").mkdir(parents=True)
    (tmp_path / "vendor" / "gems" / "lib.rb").write_text("t('vendored')\n")
    (tmp_path / "app.rb").write_text("t('a')\n")
    (tmp_path / "Rakefile.rake").write_text("t('b')\n")
    (tmp_path / "notes.txt").write_text("t('c')\n")

    files = collect_files([tmp_path, tmp_path / "app.rb"])

    assert [f.name for f in files] == ["Rakefile.rake", "app.rb"]


def test_scan_json():
    result = runner.invoke(app, ["scan", str(APP_DIR), "--json"])

    assert result.exit_code == 0, result.output
    records = json.loads(result.stdout)
    keys = [record["key"] for record in records]
    assert "events.create.relative_key" in keys
    assert "admin.reports.index.title" in keys
    assert "activerecord.attributes.event.title" in keys

    record = next(r for r in records if r["key"] == "admin.reports.index.title")
    assert record["raw_key"] == ".title"
    assert record["line_num"] == 5
    assert record["path"].endswith("reports_controller.rb")


def test_scan_unique_keys():
    result = runner.invoke(app, ["scan", str(APP_DIR / "models"), "--unique"])

    assert result.exit_code == 0, result.output
    assert result.stdout.split() == [
        "activerecord.attributes.event.title",
        "activerecord.models.event.other",
        "activerecord.models.event.one",
        "errors.event.title_missing",
    ]


def test_scan_plain_mode():
    result = runner.invoke(app, ["scan", str(APP_DIR / "models"), "--mode", "plain", "--unique", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == ["errors.event.title_missing"]


def test_relative_root_option():
    result = runner.invoke(app, ["scan", str(APP_DIR / "controllers"), "-r", "app/models", "-u"])

    assert result.exit_code == 0, result.output
    assert "events.create.relative_key" not in result.stdout
    assert "absolute_key" in result.stdout.split()


def test_table_output():
    result = runner.invoke(app, ["scan", str(APP_DIR / "models" / "event.rb")])

    assert result.exit_code == 0, result.output
    assert "4 occurrences in 1 files" in result.stdout


def test_broken_files_fail():
    result = runner.invoke(app, ["scan", str(FIXTURES_DIR / "broken")])

    assert result.exit_code == 1
    assert "Cyclic call detected: method_a -> method_b -> method_a" in result.output
    assert "syntax error" in result.output


def test_invalid_mode():
    result = runner.invoke(app, ["scan", str(APP_DIR), "--mode", "haml"])

    assert result.exit_code == 2


def test_no_files(tmp_path):
    result = runner.invoke(app, ["scan", str(tmp_path)])

    assert result.exit_code == 1


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout
