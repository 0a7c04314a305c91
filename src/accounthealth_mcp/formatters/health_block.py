"""Render a health score report as a plain-text prompt block."""

from accounthealth_mcp.formatters.cells import sanitize_cell
from accounthealth_mcp.models.health import (
    CATEGORY_NAMES,
    CATEGORY_ORDER,
    HealthScoreReport,
)
from accounthealth_mcp.models.snapshot import (
    SOURCE_LABELS,
    AccountSnapshot,
    DataSource,
    SourceState,
)

NO_CHECK_FINDING = "No data: category was not evaluated."


def _score(value: float) -> str:
    return f"{value:.1f}/100"


def _availability_lines(snapshot: AccountSnapshot) -> list[str]:
    lines = ["DATA AVAILABILITY:"]
    for source in DataSource:
        label = SOURCE_LABELS[source]
        state = snapshot.source_state(source)
        if state == SourceState.UNAVAILABLE:
            reason = sanitize_cell(snapshot.unavailable[source.value])
            detail = f"unavailable (fetch failed: {reason})"
        elif state == SourceState.EMPTY:
            detail = "no records returned"
        else:
            detail = f"{len(snapshot.collection(source))} records"
        skipped = snapshot.skipped.get(source.value, 0)
        if skipped:
            detail += f", {skipped} unusable records skipped"
        lines.append(f"- {label}: {detail}")
    return lines


def format_health_block(
    report: HealthScoreReport,
    snapshot: AccountSnapshot | None = None,
) -> str:
    """Render ``report`` as deterministic text.

    Every category gets a table row and a recommendation line, even when the
    report lacks a check for it, so the block never silently drops a
    category. Identical input always produces identical text.

    Args:
        report: Aggregated health report
        snapshot: When given, a DATA AVAILABILITY section lists each source

    Returns:
        The health block text, newline terminated
    """
    checks = {c.category: c for c in report.checks}
    lines = [
        f"=== ACCOUNT HEALTH SCORE: {_score(report.overall_score)} "
        f"({report.overall_grade}) ===",
        sanitize_cell(report.summary),
        "",
        "| Check | Score | Status | Confidence | Key Finding |",
        "|-------|-------|--------|------------|-------------|",
    ]
    for category in CATEGORY_ORDER:
        check = checks.get(category)
        if check is None:
            lines.append(
                f"| {CATEGORY_NAMES[category]} | n/a | n/a | low | "
                f"{NO_CHECK_FINDING} |"
            )
            continue
        confidence = "low" if check.low_confidence else "normal"
        lines.append(
            f"| {sanitize_cell(check.name)} | {_score(check.score)} | "
            f"{check.status.value} | {confidence} | {sanitize_cell(check.finding)} |"
        )

    lines += ["", "TOP ISSUES TO ADDRESS:"]
    if report.top_issues:
        for i, issue in enumerate(report.top_issues, 1):
            lines.append(
                f"{i}. [{issue.status.value}] {sanitize_cell(issue.name)} "
                f"({_score(issue.score)}): {sanitize_cell(issue.recommendation)}"
            )
    else:
        lines.append("No data: no category had enough data to be scored.")

    lines += ["", "RECOMMENDATIONS BY CATEGORY:"]
    for category in CATEGORY_ORDER:
        check = checks.get(category)
        name = CATEGORY_NAMES[category]
        if check is None:
            lines.append(f"- {name}: {NO_CHECK_FINDING}")
            continue
        marker = " (low confidence)" if check.low_confidence else ""
        lines.append(f"- {name}{marker}: {sanitize_cell(check.recommendation)}")

    if snapshot is not None:
        lines.append("")
        lines += _availability_lines(snapshot)

    return "\n".join(lines) + "\n"
