"""
Metrics report generation and export.

Documents a computed metrics bundle for human review: the readiness factors,
the load windows, the recommendation branch and any availability gating.
Reports are exported to JSON (the bundle itself) and Markdown.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from src.schemas import MetricsBundle, ReadinessStatus


class MetricsReportBuilder:
    """
    Builds and exports a report for one metrics bundle.

    The JSON export is the cached score record a caller may persist, keyed
    by user and computed-at instant.
    """

    def __init__(self, bundle: MetricsBundle):
        """
        Initialize report builder.

        Args:
            bundle: Metrics computed from one snapshot
        """
        self.bundle = bundle

    @property
    def computed_at(self) -> datetime:
        return datetime.fromtimestamp(self.bundle.computed_at / 1000, tz=timezone.utc)

    def export_to_json(self) -> dict:
        """
        Export report to JSON-serializable dictionary.

        Returns:
            Dictionary representation of the bundle
        """
        return self.bundle.model_dump(mode="json")

    def export_to_markdown(self) -> str:
        """
        Export report to human-readable Markdown format.

        Returns:
            Markdown-formatted report
        """
        bundle = self.bundle
        readiness = bundle.readiness
        load = bundle.load_ratio
        recommendation = bundle.recommendation
        lines = []

        # Header
        lines.append("# Training Readiness Report")
        lines.append("")
        lines.append(f"**Computed:** {self.computed_at.strftime('%Y-%m-%d %H:%M:%S')} UTC")
        lines.append(f"**Climber:** `{bundle.user_id or 'anonymous'}`")
        lines.append(f"**Sessions analysed:** {readiness.session_count}")
        if bundle.skipped_records:
            lines.append(f"**Records skipped:** {bundle.skipped_records}")
        lines.append("")
        lines.append("---")
        lines.append("")

        # Readiness
        lines.append("## Readiness")
        lines.append("")
        if readiness.status == ReadinessStatus.BUILDING:
            lines.append("**Score:** -- (building baseline)")
        else:
            lines.append(f"**Score:** {readiness.score} → **{readiness.zone.value.upper()}**")
            lines.append(f"**Status:** {readiness.status.value} (confidence {readiness.confidence:.0%})")
        if readiness.message:
            lines.append("")
            lines.append(readiness.message)
        lines.append("")

        if readiness.breakdown:
            lines.append("| Factor | Score |")
            lines.append("|--------|-------|")
            for factor, value in readiness.breakdown.items():
                lines.append(f"| {factor.replace('_', ' ').title()} | {value:.1f} |")
            lines.append("")

        lines.append("---")
        lines.append("")

        # Load ratio
        lines.append("## Load Ratio")
        lines.append("")
        if not load.available:
            lines.append("*Hidden until enough sessions are logged.*")
            lines.append("")
        if load.ratio is None:
            lines.append("**Ratio:** -- (no baseline load)")
        else:
            lines.append(f"**Ratio:** {load.ratio:.2f} → **{load.zone.value.upper()}**")
        lines.append(f"- **Recent load (7 days):** {load.acute_load:.1f}")
        lines.append(f"- **Baseline load:** {load.chronic_load:.1f} over {load.baseline_days:.1f} days")
        if load.message:
            lines.append(f"- {load.message}")
        lines.append("")
        lines.append("---")
        lines.append("")

        # Recommendation
        lines.append("## Recommended Training")
        lines.append("")
        lines.append(f"**{recommendation.type}**: {recommendation.focus}")
        if recommendation.target_volume:
            lines.append(f"- **Volume:** {recommendation.target_volume} climbs")
        if recommendation.target_rpe:
            lines.append(f"- **Effort:** RPE {recommendation.target_rpe}")
        if recommendation.warning:
            lines.append("")
            lines.append(f"⚠️ {recommendation.warning}")
        lines.append("")
        lines.append("---")
        lines.append("")

        lines.append(f"*Overall confidence: {bundle.availability.overall_confidence.value}*")

        return "\n".join(lines)

    def save_to_file(self, output_dir: Path, format: str = "json") -> Path:
        """
        Save report to file in specified format.

        Args:
            output_dir: Directory to save report file
            format: Output format ("json" or "markdown")

        Returns:
            Path to saved file

        Raises:
            ValueError: If format is not supported
        """
        if format not in ("json", "markdown"):
            raise ValueError(f"Unsupported format: {format}. Use 'json' or 'markdown'")

        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp_str = self.computed_at.strftime("%Y%m%d_%H%M%S")
        user_id = (self.bundle.user_id or "anonymous").replace(" ", "_")

        if format == "json":
            filepath = output_dir / f"metrics_{user_id}_{timestamp_str}.json"
            with open(filepath, "w") as f:
                json.dump(self.export_to_json(), f, indent=2)
        else:
            filepath = output_dir / f"metrics_{user_id}_{timestamp_str}.md"
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(self.export_to_markdown())

        return filepath


def load_report_from_file(filepath: Path) -> MetricsBundle:
    """
    Load a saved metrics bundle from a JSON report.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is invalid
    """
    if not filepath.exists():
        raise FileNotFoundError(f"Report file not found: {filepath}")

    with open(filepath, "r") as f:
        data = json.load(f)

    try:
        return MetricsBundle(**data)
    except Exception as e:
        raise ValueError(f"Invalid report file: {e}")
