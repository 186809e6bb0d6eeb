"""Bug dashboard service: fetch, classify and summarize Jira bugs."""

import logging
from collections import namedtuple
from datetime import datetime, timezone
from typing import Optional

from services import aggregation, queries
from services.classifier import PortfolioClassifier
from services.jira_search import JiraSearchError

logger = logging.getLogger(__name__)

WindowResult = namedtuple("WindowResult", ["issues", "error"])


def transform_issue(issue: dict, classification, custom_fields: Optional[dict] = None) -> dict:
    """Shape a raw Jira issue into the record served to the dashboard."""
    fields = issue.get("fields") or {}
    status = fields.get("status") or {}
    priority = fields.get("priority") or {}
    assignee = fields.get("assignee")
    reporter = fields.get("reporter") or {}

    record = {
        "id": issue.get("id"),
        "key": issue.get("key"),
        "summary": fields.get("summary"),
        "status": {
            "name": status.get("name"),
            "category": (status.get("statusCategory") or {}).get("name"),
        },
        "priority": {
            "name": priority.get("name") or "None",
            "iconUrl": priority.get("iconUrl") or "",
        },
        "assignee": {
            "displayName": assignee.get("displayName"),
            "emailAddress": assignee.get("emailAddress"),
            "avatarUrls": assignee.get("avatarUrls"),
            "accountId": assignee.get("accountId"),
        } if assignee else None,
        "reporter": {
            "displayName": reporter.get("displayName"),
            "emailAddress": reporter.get("emailAddress"),
        },
        "created": fields.get("created"),
        "updated": fields.get("updated"),
        "resolved": fields.get("resolved"),
        "labels": fields.get("labels") or [],
        "components": fields.get("components") or [],
        "fixVersions": fields.get("fixVersions") or [],
        "team": classification.team,
        "portfolio": classification.portfolio,
        "managerGroup": classification.manager_group,
    }
    if custom_fields is not None:
        record["customFields"] = custom_fields
    return record


class BugDashboardService:
    """Service backing the triage, bugs, backlog and trend dashboards."""

    def __init__(self, client, reference_data, classifier: Optional[PortfolioClassifier] = None):
        self.client = client
        self.reference_data = reference_data
        self.classifier = classifier or PortfolioClassifier(reference_data)

    def close(self):
        """Release the Jira client's HTTP session."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _fetch(self, label: str, jql: str, max_pages: int) -> WindowResult:
        """Run one search; on failure log it and return an empty window."""
        try:
            return WindowResult(self.client.search(jql, max_pages=max_pages), None)
        except JiraSearchError as e:
            logger.error(f"Failed to fetch {label}: {e}")
            return WindowResult([], str(e))

    def _triage_records(self, issues: list) -> list:
        records = []
        for issue in issues:
            classification = self.classifier.classify_triage(issue)
            records.append(transform_issue(issue, classification))
        return records

    def get_bugs(self, release_name: Optional[str] = None) -> WindowResult:
        """All bugs created during a release, classified with the triage cascade."""
        release = queries.resolve_release(self.reference_data, release_name)
        result = self._fetch(f"bugs ({release.name})", queries.bugs_jql(self.reference_data, release),
                             queries.BUGS_MAX_PAGES)

        records = []
        for issue in result.issues:
            classification = self.classifier.classify_triage(issue)
            fields = issue.get("fields") or {}
            status_name = (fields.get("status") or {}).get("name") or ""
            records.append(transform_issue(issue, classification, {
                "triageDate": fields.get("created"),
                "triageStatus": "Triaged" if "triaged" in status_name.lower() else "Pending",
                "triagePriority": (fields.get("priority") or {}).get("name") or "None",
            }))
        return WindowResult(records, result.error)

    def get_triage_bugs(self, release_name: Optional[str] = None) -> WindowResult:
        """Bugs from a release that were still open at its end date."""
        release = queries.resolve_release(self.reference_data, release_name)
        result = self._fetch(f"triage ({release.name})", queries.triage_jql(self.reference_data, release),
                             queries.TRIAGE_MAX_PAGES)

        records = []
        for issue in result.issues:
            classification = self.classifier.classify_triage(issue)
            fields = issue.get("fields") or {}
            records.append(transform_issue(issue, classification, {
                "triageDate": fields.get("created"),
                "triageStatus": "Triaged",
                "triagePriority": (fields.get("priority") or {}).get("name") or "None",
            }))
        return WindowResult(records, result.error)

    def get_backlog_bugs(self, release_name: Optional[str] = None,
                         now: Optional[datetime] = None) -> WindowResult:
        """Open backlog today (``all``) or at a release cutoff, by backlog bucket."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if release_name and release_name.lower() == queries.ALL_RELEASES:
            jql = queries.backlog_jql(self.reference_data)
            max_pages = queries.BACKLOG_ALL_MAX_PAGES
            label = "backlog (all)"
        else:
            release = queries.resolve_release(self.reference_data, release_name)
            jql = queries.backlog_jql(self.reference_data, release)
            max_pages = queries.BACKLOG_RELEASE_MAX_PAGES
            label = f"backlog ({release.name})"

        result = self._fetch(label, jql, max_pages)

        records = []
        for issue in result.issues:
            classification = self.classifier.classify_backlog(issue)
            fields = issue.get("fields") or {}
            created = aggregation.parse_jira_date(fields.get("created"))
            records.append(transform_issue(issue, classification, {
                "backlogAge": (now - created).days if created else None,
                "backlogStatus": "Active",
                "backlogPriority": (fields.get("priority") or {}).get("name") or "None",
            }))
        return WindowResult(records, result.error)

    def get_backlog_trend(self) -> dict:
        """Classified issues for every trend window, keyed in calendar order.

        Windows are fetched in parallel; a failing window keeps whatever it
        had collected.
        """
        raw = self.client.search_many(queries.trend_queries(self.reference_data),
                                      max_pages=queries.TREND_MAX_PAGES)
        trend = {}
        for window, issues in raw.items():
            trend[window] = self._triage_records(issues)
            logger.info(f"Total backlog trend issues for {window}: {len(trend[window])}")
        return trend

    def get_trend_summary(self) -> dict:
        ref = self.reference_data
        return aggregation.build_trend_report(
            self.get_backlog_trend(), ref.releases, ref.triage_portfolio_order, ref.triage_fallback
        )

    def get_backlog_summary(self, release_name: Optional[str] = None,
                            now: Optional[datetime] = None) -> dict:
        ref = self.reference_data
        result = self.get_backlog_bugs(release_name, now=now)
        engineering = [b.label for b in ref.backlog_buckets]
        summary = {
            "portfolios": aggregation.summarize_backlog_portfolios(
                result.issues, ref.backlog_portfolio_order, ref.backlog_fallback, now=now
            ),
            "segments": aggregation.split_engineering(result.issues, engineering, ref.backlog_fallback),
        }
        if result.error:
            summary["error"] = result.error
        return summary

    def get_triage_summary(self, release_name: Optional[str] = None) -> dict:
        ref = self.reference_data
        triage = self.get_triage_bugs(release_name)
        bugs = self.get_bugs(release_name)
        summary = {
            "portfolios": aggregation.summarize_triage(
                triage.issues, bugs.issues, ref.triage_portfolio_order, ref.triage_fallback
            ),
            "metrics": aggregation.calculate_bug_metrics(bugs.issues, ref.triage_fallback),
        }
        errors = [e for e in (triage.error, bugs.error) if e]
        if errors:
            summary["error"] = "; ".join(errors)
        return summary

    def explain_issue(self, issue_key: str) -> dict:
        """Fetch one issue and report how both cascades classify it.

        Raises:
            JiraSearchError: If the issue cannot be fetched.
        """
        issue = self.client.get_issue(issue_key)
        explanation = self.classifier.explain(issue)
        explanation["key"] = issue.get("key", issue_key)
        return explanation
