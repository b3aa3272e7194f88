"""Integrity report generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from content_graph.validation.fixes import merge_duplicate_edges
from content_graph.validation.queries import run_all_validations

if TYPE_CHECKING:
    from content_graph.snapshot import CatalogSnapshot
    from content_graph.store.base import RecordStore

logger = structlog.get_logger(__name__)

_TABLE_LIMIT = 15


@dataclass
class IntegrityReport:
    """Structured relationship-graph integrity report.

    Attributes:
        timestamp: When the checks ran.
        validation_passed: True when no check found a problem.
        summary: Problem flags (True means the problem was found).
        details: Per-check results (counts, groups, edge lists).
        recommendations: Console commands that address the problems found.
    """

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    validation_passed: bool = False
    summary: dict[str, bool] = field(default_factory=dict)
    details: dict[str, Any] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)

    def to_markdown(self) -> str:
        """Generate markdown report."""
        lines = [
            "# Content Graph Integrity Report",
            "",
            f"**Generated:** {self.timestamp.isoformat()}",
            f"**Status:** {'✅ PASSED' if self.validation_passed else '❌ FAILED'}",
            "",
            "## Summary",
            "",
            "| Check | Status |",
            "|-------|--------|",
        ]
        for check, found in self.summary.items():
            lines.append(f"| {check.replace('_', ' ').title()} | {'❌' if found else '✅'} |")
        lines.append("")

        lines.append("## Details")
        lines.append("")
        lines.append(
            f"**{self.details.get('total_edges', 0)}** relationships "
            f"({self.details.get('protected_edges', 0)} game links not checked)."
        )
        lines.append("")

        if self.details.get("entity_counts"):
            lines.append("### Entity Counts")
            lines.append("")
            lines.append("| Type | Count |")
            lines.append("|------|-------|")
            for content_type, count in self.details["entity_counts"].items():
                lines.append(f"| {content_type} | {count} |")
            lines.append("")

        duplicates = self.details.get("duplicate_groups", [])
        if duplicates:
            lines.append("### ⚠️ Duplicate Relationships")
            lines.append("")
            lines.append("| Pair | Edges | Labels |")
            lines.append("|------|-------|--------|")
            for group in duplicates[:_TABLE_LIMIT]:
                lines.append(
                    f"| {group['pair']} | {', '.join(group['edge_ids'])} | {', '.join(group['labels'])} |"
                )
            if len(duplicates) > _TABLE_LIMIT:
                lines.append(f"| ... | {len(duplicates) - _TABLE_LIMIT} more pairs | ... |")
            lines.append("")

        dangling = self.details.get("dangling_edges", [])
        if dangling:
            lines.append("### ⚠️ Dangling Relationships")
            lines.append("")
            lines.append(f"Found **{len(dangling)}** relationships pointing at missing entities:")
            lines.append("")
            for edge in dangling[:_TABLE_LIMIT]:
                lines.append(f"  - {edge['edge_id']}: {edge['source']} -> {edge['target']}")
            if len(dangling) > _TABLE_LIMIT:
                lines.append(f"  - ... and {len(dangling) - _TABLE_LIMIT} more")
            lines.append("")

        invalid = self.details.get("invalid_labels", [])
        if invalid:
            lines.append("### ⚠️ Disallowed Labels")
            lines.append("")
            lines.append("| Edge | Source | Target | Labels |")
            lines.append("|------|--------|--------|--------|")
            for item in invalid[:_TABLE_LIMIT]:
                labels = ", ".join(item["labels"]) or "(none)"
                lines.append(f"| {item['edge_id']} | {item['source']} | {item['target']} | {labels} |")
            lines.append("")

        if self.recommendations:
            lines.append("## Recommendations")
            lines.append("")
            for rec in self.recommendations:
                lines.append(f"- {rec}")
            lines.append("")

        return "\n".join(lines)

    def save(self, filepath: Path) -> None:
        """Save report to file, archiving an existing one first.

        Args:
            filepath: Destination markdown file.
        """
        if filepath.exists():
            mtime = filepath.stat().st_mtime
            ts = datetime.fromtimestamp(mtime, tz=timezone.utc).strftime("%Y-%m-%dT%H%M%S")
            archived = filepath.with_name(f"{filepath.stem}_{ts}{filepath.suffix}")
            filepath.rename(archived)
            logger.info("Archived previous report", path=str(archived))
        filepath.write_text(self.to_markdown(), encoding="utf-8")
        logger.info("Saved integrity report", path=str(filepath))


def _recommendations(results: dict[str, Any]) -> list[str]:
    recs = []
    if results["summary"]["has_duplicates"]:
        recs.append("Run `content-graph validate --fix` to merge duplicate relationships.")
    if results["summary"]["has_dangling_edges"]:
        recs.append("Remove dangling relationships with `content-graph unlink EDGE_ID`.")
    if results["summary"]["has_invalid_labels"]:
        recs.append("Review relationships with disallowed labels and relink them.")
    return recs


class GraphValidator:
    """Validates the relationship graph and repairs duplicates.

    Example:
        >>> validator = GraphValidator(store, snapshot)
        >>> report = await validator.validate()
        >>> report.save(Path("integrity_report.md"))
    """

    def __init__(self, store: RecordStore, snapshot: CatalogSnapshot) -> None:
        self.store = store
        self.snapshot = snapshot

    async def validate(self) -> IntegrityReport:
        """Run every check and build a report.

        Raises:
            StoreError: If the relationship collection cannot be read.
        """
        results = await run_all_validations(self.store, self.snapshot)
        details = {key: value for key, value in results.items() if key not in ("summary", "validation_passed")}
        return IntegrityReport(
            validation_passed=results["validation_passed"],
            summary=results["summary"],
            details=details,
            recommendations=_recommendations(results),
        )

    async def merge_duplicate_edges(self, dry_run: bool = False) -> dict[str, Any]:
        """Merge duplicate edges into the oldest edge of each pair."""
        return await merge_duplicate_edges(self.store, dry_run=dry_run)
