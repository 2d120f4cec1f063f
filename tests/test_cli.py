import pytest
from typer.testing import CliRunner

from catalog_explorer.cli import app


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, data_dir, *args):
    return runner.invoke(app, ["--data-dir", str(data_dir), *args])


def test_keyword_uses_interactive_threshold(runner, data_dir):
    result = invoke(runner, data_dir, "keyword", "k")
    assert result.exit_code == 0
    assert "Found 1 datasets" in result.output


def test_keyword_with_explicit_threshold(runner, data_dir):
    result = invoke(runner, data_dir, "keyword", "k", "--threshold", "0")
    assert result.exit_code == 0
    assert "Found 2 datasets" in result.output


def test_keyword_without_results(runner, data_dir):
    result = invoke(runner, data_dir, "keyword", "unknown")
    assert result.exit_code == 0
    assert "No datasets found." in result.output


def test_concept(runner, data_dir):
    result = invoke(runner, data_dir, "concept", "Grid")
    assert result.exit_code == 0
    assert "Found 2 datasets" in result.output


def test_unknown_concept(runner, data_dir):
    result = invoke(runner, data_dir, "concept", "Nope")
    assert result.exit_code == 1


def test_situation(runner, data_dir):
    result = invoke(runner, data_dir, "situation", "Reliability review")
    assert result.exit_code == 0
    assert "Found 2 datasets" in result.output


def test_faq(runner, data_dir):
    result = invoke(runner, data_dir, "faq", "Where did outages happen?")
    assert result.exit_code == 0
    assert "Start from the outage log" in result.output
    assert "Found 2 datasets" in result.output


def test_related(runner, data_dir):
    result = invoke(runner, data_dir, "related", "keyword_outage")
    assert result.exit_code == 0
    assert "ds_outage_log" in result.output


def test_stats(runner, data_dir):
    result = invoke(runner, data_dir, "stats", "--type", "keyword")
    assert result.exit_code == 0
    assert "Facilities" in result.output
    assert "Visible: 2 nodes" in result.output


def test_missing_data(runner, tmp_path):
    result = invoke(runner, tmp_path, "keyword", "k")
    assert result.exit_code == 1
    assert "Could not load catalog" in result.output
