"""Portfolio aggregation over classified issues.

Every function here takes classified issue records (the dicts produced by
``BugDashboardService``) and is pure: no Jira calls, no clock reads unless a
``now`` is passed in.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

ENGINEERING = "Engineering"
NON_ENGINEERING = "Non-Eng"

OLD_BUG_DAYS = 365


def parse_jira_date(date_str: Optional[str]) -> Optional[datetime]:
    """Parse a Jira timestamp into a timezone-aware datetime (UTC if none given)."""
    if not date_str:
        return None

    # Jira formats: "2024-10-31T12:11:56.289-0400" or "2024-10-31T12:11:56.289+0000"
    formats = [
        "%Y-%m-%dT%H:%M:%S.%f%z",
        "%Y-%m-%dT%H:%M:%S%z",
        "%Y-%m-%dT%H:%M:%S.%f",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%d",
    ]

    for fmt in formats:
        try:
            parsed = datetime.strptime(date_str, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return None


def group_by_portfolio(issues: list, fallback: str) -> dict:
    """Group issues by their ``portfolio``; missing portfolios use ``fallback``."""
    groups = {}
    for issue in issues or []:
        portfolio = issue.get("portfolio") or fallback
        groups.setdefault(portfolio, []).append(issue)
    return groups


def order_portfolios(names, preferred) -> list:
    """Known portfolios in ``preferred`` order, then unknown ones alphabetically."""
    position = {name: i for i, name in enumerate(preferred)}
    known = sorted((n for n in set(names) if n in position), key=position.get)
    unknown = sorted(n for n in set(names) if n not in position)
    return known + unknown


def summarize_windows(window_issues: dict, windows: list, preferred_order,
                      fallback: str) -> dict:
    """Count issues per (portfolio, window).

    Args:
        window_issues: Mapping of window name to its classified issues. Each
            window is an already-filtered snapshot set.
        windows: Window names to include, in column order.
        preferred_order: Display order for known portfolios.
        fallback: Portfolio label for issues that carry none.

    Returns:
        ``{"windows": [...], "rows": [...], "totals": {...}}`` where each row
        holds the portfolio, one count per window and a ``total``.
    """
    grouped = {
        window: group_by_portfolio(window_issues.get(window, []), fallback)
        for window in windows
    }

    portfolios = set()
    for groups in grouped.values():
        portfolios.update(groups)

    rows = []
    for portfolio in order_portfolios(portfolios, preferred_order):
        row = {"portfolio": portfolio}
        for window in windows:
            row[window] = len(grouped[window].get(portfolio, []))
        row["total"] = sum(row[window] for window in windows)
        rows.append(row)

    totals = {window: sum(row[window] for row in rows) for window in windows}
    totals["total"] = sum(totals[window] for window in windows)

    return {"windows": list(windows), "rows": rows, "totals": totals}


def build_trend_report(trend_data: dict, releases, preferred_order, fallback: str) -> dict:
    """Build the backlog trend tables from the per-window trend data.

    Produces the backlog carried into each release, the additions during each
    release, the pre-existing backlog resolved during each release, and a
    breakdown with all three columns per release.
    """
    before = [f"before{r.label}" for r in releases]
    additions = [r.name for r in releases]
    resolved = [f"{r.name}Resolved" for r in releases]
    breakdown = []
    for b, a, r in zip(before, additions, resolved):
        breakdown.extend([b, a, r])

    return {
        "releases": [{"name": r.name, "label": r.label} for r in releases],
        "backlogBefore": summarize_windows(trend_data, before, preferred_order, fallback),
        "additions": summarize_windows(trend_data, additions, preferred_order, fallback),
        "resolved": summarize_windows(trend_data, resolved, preferred_order, fallback),
        "breakdown": summarize_windows(trend_data, breakdown, preferred_order, fallback),
    }


def _sorted_unique(values) -> list:
    return sorted({v for v in values if v})


def summarize_backlog_portfolios(issues: list, preferred_order, fallback: str,
                                 now: Optional[datetime] = None) -> dict:
    """Per-portfolio backlog summary with the count of bugs older than a year."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - timedelta(days=OLD_BUG_DAYS)

    grouped = group_by_portfolio(issues, fallback)
    rows = []
    for portfolio in order_portfolios(grouped, preferred_order):
        portfolio_issues = grouped[portfolio]
        old = 0
        for issue in portfolio_issues:
            created = parse_jira_date(issue.get("created"))
            if created and created < cutoff:
                old += 1
        rows.append({
            "portfolio": portfolio,
            "totalIssues": len(portfolio_issues),
            "bugsOver365Days": old,
            "managerGroups": _sorted_unique(i.get("managerGroup") for i in portfolio_issues),
            "teams": _sorted_unique(i.get("team") for i in portfolio_issues),
        })

    return {
        "rows": rows,
        "totals": {
            "totalIssues": sum(r["totalIssues"] for r in rows),
            "bugsOver365Days": sum(r["bugsOver365Days"] for r in rows),
        },
    }


def _percentage(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def split_engineering(issues: list, engineering_portfolios, fallback: str) -> dict:
    """Split backlog issues into Engineering and Non-Eng segments.

    Engineering covers the manager-owned backlog buckets; everything else,
    including the catch-all, is Non-Eng.
    """
    engineering_portfolios = list(engineering_portfolios)
    total = len(issues or [])
    engineering = [
        i for i in issues or []
        if (i.get("portfolio") or fallback) in engineering_portfolios
    ]
    non_eng = total - len(engineering)

    drill_down = []
    for portfolio in engineering_portfolios:
        count = sum(1 for i in engineering if i.get("portfolio") == portfolio)
        if count:
            drill_down.append({
                "label": portfolio,
                "count": count,
                "percentage": _percentage(count, len(engineering)),
            })

    return {
        "total": total,
        "segments": [
            {"label": ENGINEERING, "count": len(engineering),
             "percentage": _percentage(len(engineering), total)},
            {"label": NON_ENGINEERING, "count": non_eng,
             "percentage": _percentage(non_eng, total)},
        ],
        "engineering": drill_down,
    }


def summarize_triage(triage_issues: list, all_issues: list, preferred_order,
                     fallback: str) -> dict:
    """Per-portfolio share of a release's bugs still awaiting triage at cutoff."""
    triage_groups = group_by_portfolio(triage_issues, fallback)
    total_groups = group_by_portfolio(all_issues, fallback)

    rows = []
    for portfolio in order_portfolios(set(triage_groups) | set(total_groups), preferred_order):
        in_triage = triage_groups.get(portfolio, [])
        in_total = total_groups.get(portfolio, [])
        rows.append({
            "portfolio": portfolio,
            "triageIssues": len(in_triage),
            "totalIssues": len(in_total),
            "percentageTriaged": _percentage(len(in_triage), len(in_total)),
            "managerGroups": _sorted_unique(i.get("managerGroup") for i in in_triage),
            "teams": _sorted_unique(i.get("team") for i in in_triage),
        })

    triage_total = sum(r["triageIssues"] for r in rows)
    overall_total = sum(r["totalIssues"] for r in rows)
    return {
        "rows": rows,
        "totals": {
            "triageIssues": triage_total,
            "totalIssues": overall_total,
            "percentageTriaged": _percentage(triage_total, overall_total),
        },
    }


def calculate_bug_metrics(issues: list, fallback: str = "Unknown") -> dict:
    """Headline metrics for a list of classified bugs.

    Returns:
        dict with total, triaged, resolved, per-priority counts, average
        triage time in hours, average resolution time in days, and counts by
        portfolio and by team.
    """
    issues = issues or []
    total = len(issues)
    triaged = sum(1 for i in issues if (i.get("customFields") or {}).get("triageStatus") == "Triaged")
    resolved = sum(1 for i in issues if (i.get("status") or {}).get("category") == "Done")

    priority_counts = {}
    for issue in issues:
        name = ((issue.get("priority") or {}).get("name") or "None").lower()
        priority_counts[name] = priority_counts.get(name, 0) + 1

    triage_seconds = 0.0
    resolution_seconds = 0.0
    for issue in issues:
        created = parse_jira_date(issue.get("created"))
        if not created:
            continue
        triage_date = parse_jira_date((issue.get("customFields") or {}).get("triageDate"))
        if triage_date:
            triage_seconds += (triage_date - created).total_seconds()
        resolved_date = parse_jira_date(issue.get("resolved"))
        if resolved_date:
            resolution_seconds += (resolved_date - created).total_seconds()

    by_portfolio = {}
    by_team = {}
    for issue in issues:
        portfolio = issue.get("portfolio") or fallback
        by_portfolio[portfolio] = by_portfolio.get(portfolio, 0) + 1
        team = issue.get("team") or fallback
        by_team[team] = by_team.get(team, 0) + 1

    return {
        "total": total,
        "triaged": triaged,
        "resolved": resolved,
        "critical": priority_counts.get("critical", 0),
        "high": priority_counts.get("high", 0),
        "medium": priority_counts.get("medium", 0),
        "low": priority_counts.get("low", 0),
        "avgTriageTime": triage_seconds / max(triaged, 1) / 3600,
        "avgResolutionTime": resolution_seconds / max(resolved, 1) / 86400,
        "byPortfolio": by_portfolio,
        "byTeam": by_team,
    }
