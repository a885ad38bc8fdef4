"""
Tests for metrics report generation and export.

Covers:
- JSON and Markdown export
- File saving and naming
- Loading saved reports
"""

import json

import pytest

from src.engine import MetricsEngine
from src.report import MetricsReportBuilder, load_report_from_file
from src.schemas import SessionContext


@pytest.fixture
def bundle(steady_history, now):
    """Metrics for a steady training history."""
    context = SessionContext(user_id="climber 1", sessions=tuple(steady_history), now=now)
    return MetricsEngine().compute(context)


@pytest.fixture
def building_bundle(now):
    """Metrics for a climber with no sessions."""
    return MetricsEngine().compute(SessionContext(sessions=(), now=now))


def test_export_to_json(bundle):
    """Test that the JSON export is the serialised bundle."""
    data = MetricsReportBuilder(bundle).export_to_json()

    assert data["user_id"] == "climber 1"
    assert data["readiness"]["score"] == 63
    assert data["readiness"]["zone"] == "balanced"
    assert data["load_ratio"]["zone"] == "optimal"
    assert data["recommendation"]["type"] == "Capacity"
    json.dumps(data)


def test_export_to_markdown(bundle):
    """Test the Markdown report sections."""
    markdown = MetricsReportBuilder(bundle).export_to_markdown()

    assert markdown.startswith("# Training Readiness Report")
    assert "**Computed:** 2023-11-14 22:13:20 UTC" in markdown
    assert "## Readiness" in markdown
    assert "**BALANCED**" in markdown
    assert "| Recovery | 33.3 |" in markdown
    assert "## Load Ratio" in markdown
    assert "**Ratio:** 1.24" in markdown
    assert "## Recommended Training" in markdown
    assert "*Overall confidence: medium*" in markdown


def test_markdown_for_building_baseline(building_bundle):
    """Test that placeholders are shown instead of scores."""
    markdown = MetricsReportBuilder(building_bundle).export_to_markdown()

    assert "**Score:** -- (building baseline)" in markdown
    assert "*Hidden until enough sessions are logged.*" in markdown
    assert "**Climber:** `anonymous`" in markdown


def test_save_to_file_json(bundle, tmp_path):
    """Test saving and reloading a JSON report."""
    path = MetricsReportBuilder(bundle).save_to_file(tmp_path / "reports")

    assert path.name == "metrics_climber_1_20231114_221320.json"
    assert path.exists()
    assert load_report_from_file(path) == bundle


def test_save_to_file_markdown(bundle, tmp_path):
    """Test saving a Markdown report."""
    path = MetricsReportBuilder(bundle).save_to_file(tmp_path, format="markdown")

    assert path.suffix == ".md"
    assert path.read_text(encoding="utf-8").startswith("# Training Readiness Report")


def test_save_to_file_rejects_unknown_format(bundle, tmp_path):
    """Test that unsupported formats raise ValueError."""
    with pytest.raises(ValueError, match="Unsupported format"):
        MetricsReportBuilder(bundle).save_to_file(tmp_path, format="pdf")


def test_load_report_errors(tmp_path):
    """Test missing and invalid report files."""
    with pytest.raises(FileNotFoundError):
        load_report_from_file(tmp_path / "missing.json")

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"user_id": "x"}))
    with pytest.raises(ValueError, match="Invalid report file"):
        load_report_from_file(invalid)
