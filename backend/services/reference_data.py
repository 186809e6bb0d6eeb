"""Static reference tables used by the portfolio classifiers.

The tables ship as JSON under ``backend/config`` and are loaded once when the
Flask app is created. Everything here is immutable so a single instance can be
shared by every request.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = os.path.join(os.path.dirname(__file__), "..", "config")
PORTFOLIO_MAPPING_FILE = "portfolio-mapping.json"
TEAM_MAPPING_FILE = "team-portfolio-mapping.json"


class ReferenceDataError(Exception):
    """Raised when a reference table is missing or malformed."""


@dataclass(frozen=True)
class BacklogBucket:
    """One row of the backlog cascade: a label and the predicate inputs."""

    label: str
    manager_groups: frozenset = frozenset()
    team_ids: frozenset = frozenset()
    assignee_ids: frozenset = frozenset()
    devops_project: bool = False
    excluded_manager_groups: frozenset = frozenset()


@dataclass(frozen=True)
class Release:
    name: str
    label: str
    start: date
    end: date
    trend_start: date
    trend_end: date


@dataclass(frozen=True)
class ReferenceData:
    """Immutable bundle of every table the classifiers and queries need."""

    team_field: str
    manager_group_field: str
    devops_project_key: str
    devops_issue_prefix: str
    devops_portfolio: str
    unknown_team: str
    manager_suffix: str
    team_portfolios: tuple
    person_managers: tuple
    manager_groups: tuple
    backlog_buckets: tuple
    backlog_fallback: str
    triage_fallback: str
    triage_portfolio_order: tuple
    terminal_statuses: tuple
    backlog_terminal_statuses: tuple
    triage_projects: tuple
    backlog_projects: tuple
    releases: tuple
    default_release: str
    _release_index: dict = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        # frozen dataclass, so bypass __setattr__ for the derived index
        object.__setattr__(
            self, "_release_index", {r.name: r for r in self.releases}
        )

    @property
    def backlog_portfolio_order(self) -> tuple:
        """Backlog bucket labels in cascade order, catch-all last."""
        return tuple(b.label for b in self.backlog_buckets) + (self.backlog_fallback,)

    @property
    def release_names(self) -> tuple:
        return tuple(r.name for r in self.releases)

    def get_release(self, name: Optional[str]) -> Optional[Release]:
        if not name:
            return None
        return self._release_index.get(name.lower())


def _parse_date(value: str, context: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ReferenceDataError(f"Invalid date {value!r} for {context}") from e


def _pairs(rows, context: str) -> tuple:
    pairs = []
    for row in rows:
        if not isinstance(row, (list, tuple)) or len(row) != 2:
            raise ReferenceDataError(f"Expected [key, portfolio] pairs in {context}, got {row!r}")
        pairs.append((str(row[0]), str(row[1])))
    return tuple(pairs)


def _load_json(path: str) -> dict:
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ReferenceDataError(f"Failed to load reference table {path}: {e}") from e


def build_reference_data(mapping: dict, teams: dict) -> ReferenceData:
    """Build ReferenceData from the two decoded JSON documents."""
    try:
        fields = mapping["fields"]
        devops = mapping["devops"]

        team_portfolios = tuple(
            (entry["team"], tuple(entry["portfolios"]))
            for entry in teams.get("teams", [])
            if entry.get("portfolios")
        )

        buckets = tuple(
            BacklogBucket(
                label=b["label"],
                manager_groups=frozenset(b.get("manager_groups", [])),
                team_ids=frozenset(b.get("team_ids", [])),
                assignee_ids=frozenset(b.get("assignee_ids", [])),
                devops_project=bool(b.get("devops_project", False)),
                excluded_manager_groups=frozenset(b.get("excluded_manager_groups", [])),
            )
            for b in mapping.get("backlog_buckets", [])
        )

        releases = tuple(
            Release(
                name=r["name"].lower(),
                label=r.get("label", r["name"].title()),
                start=_parse_date(r["start"], f"release {r['name']} start"),
                end=_parse_date(r["end"], f"release {r['name']} end"),
                trend_start=_parse_date(r.get("trend_start", r["start"]), f"release {r['name']} trend_start"),
                trend_end=_parse_date(r.get("trend_end", r["end"]), f"release {r['name']} trend_end"),
            )
            for r in mapping.get("releases", [])
        )

        projects = mapping.get("projects", {})

        return ReferenceData(
            team_field=fields["team"],
            manager_group_field=fields["manager_group"],
            devops_project_key=devops["project_key"],
            devops_issue_prefix=devops["issue_key_prefix"],
            devops_portfolio=devops.get("portfolio", "DevOps"),
            unknown_team=mapping.get("unknown_team", "Unknown"),
            manager_suffix=mapping.get("manager_suffix", "_Reportees"),
            team_portfolios=team_portfolios,
            person_managers=_pairs(mapping.get("person_managers", []), "person_managers"),
            manager_groups=_pairs(mapping.get("manager_groups", []), "manager_groups"),
            backlog_buckets=buckets,
            backlog_fallback=mapping.get("backlog_fallback", "Non Engineering"),
            triage_fallback=mapping.get("triage_fallback", "Unknown"),
            triage_portfolio_order=tuple(mapping.get("triage_portfolio_order", [])),
            terminal_statuses=tuple(mapping.get("terminal_statuses", [])),
            backlog_terminal_statuses=tuple(mapping.get("backlog_terminal_statuses", [])),
            triage_projects=tuple(projects.get("triage", [])),
            backlog_projects=tuple(projects.get("backlog", [])),
            releases=releases,
            default_release=mapping.get("default_release", releases[0].name if releases else ""),
        )
    except KeyError as e:
        raise ReferenceDataError(f"Missing required reference key: {e}") from e


def load_reference_data(config_dir: Optional[str] = None) -> ReferenceData:
    """Load both reference tables from ``config_dir``.

    Args:
        config_dir: Directory holding the JSON tables. Defaults to
            ``backend/config``.

    Returns:
        An immutable ReferenceData instance.
    """
    config_dir = config_dir or DEFAULT_CONFIG_DIR
    mapping = _load_json(os.path.join(config_dir, PORTFOLIO_MAPPING_FILE))
    teams = _load_json(os.path.join(config_dir, TEAM_MAPPING_FILE))
    data = build_reference_data(mapping, teams)
    logger.info(
        f"Loaded {len(data.team_portfolios)} teams, {len(data.manager_groups)} manager groups, "
        f"{len(data.backlog_buckets)} backlog buckets, {len(data.releases)} releases"
    )
    return data
