"""JQL builders for the release calendar."""

from datetime import date, timedelta
from typing import Optional

ALL_RELEASES = "all"

BUGS_MAX_PAGES = 10
TRIAGE_MAX_PAGES = 10
TREND_MAX_PAGES = 10
BACKLOG_ALL_MAX_PAGES = 30
BACKLOG_RELEASE_MAX_PAGES = 15

CREATED_DESC = "ORDER BY created DESC"
PRIORITY_THEN_AGE = "ORDER BY priority DESC, created ASC"


def _quoted(values) -> str:
    return ", ".join(f'"{v}"' for v in values)


def _day(value: date) -> str:
    return value.isoformat()


def resolve_release(reference_data, name: Optional[str]):
    """Look up a release by name, falling back to the default release."""
    release = reference_data.get_release(name)
    if release is None:
        release = reference_data.get_release(reference_data.default_release)
    return release


def bugs_jql(reference_data, release) -> str:
    """Every bug created inside the release window."""
    return (
        f"project in ({_quoted(reference_data.backlog_projects)}) "
        f"AND created >= {_day(release.start)} AND created <= {_day(release.end)} "
        f"AND issuetype = Bug {CREATED_DESC}"
    )


def triage_jql(reference_data, release) -> str:
    """Bugs created in the window that were still open on the release end date."""
    return (
        f"project in ({_quoted(reference_data.triage_projects)}) "
        f"AND created >= {_day(release.start)} AND created <= {_day(release.end)} "
        f"AND issuetype = Bug "
        f"AND status was not in ({_quoted(reference_data.terminal_statuses)}) on {_day(release.end)} "
        f"{CREATED_DESC}"
    )


def backlog_jql(reference_data, release=None) -> str:
    """Open backlog, either today (``release`` is None) or at a release cutoff.

    For a release, a bug counts when it was created on or before the cutoff
    and had not reached a terminal status before the following day.
    """
    statuses = _quoted(reference_data.backlog_terminal_statuses)
    projects = _quoted(reference_data.backlog_projects)

    if release is None:
        return (
            f"issuetype = Bug AND status NOT IN ({statuses}) "
            f"AND project in ({projects}) {PRIORITY_THEN_AGE}"
        )

    next_day = release.end + timedelta(days=1)
    return (
        f"createdDate <= {_day(release.end)} AND issuetype = Bug "
        f"AND status WAS NOT IN ({statuses}) BEFORE {_day(next_day)} "
        f"AND project in ({projects}) {PRIORITY_THEN_AGE}"
    )


def trend_window_names(release) -> tuple:
    """The three window keys for a release: before, additions, resolved."""
    return (f"before{release.label}", release.name, f"{release.name}Resolved")


def trend_queries(reference_data) -> dict:
    """Ordered JQL for every trend window of every release.

    For each release, using its trend start ``S`` and trend end ``E``:

    - ``before<Release>``: created before ``S`` and still open on ``S``
    - ``<release>``: created between ``S`` and ``E``, still open the day after ``E``
    - ``<release>Resolved``: open on ``S`` and moved to a terminal status during the window
    """
    projects = _quoted(reference_data.triage_projects)
    statuses = _quoted(reference_data.terminal_statuses)
    prefix = f"project in ({projects}) AND issuetype = Bug"

    queries = {}
    for release in reference_data.releases:
        start = release.trend_start
        end = release.trend_end
        day_before = _day(start - timedelta(days=1))
        open_at_start = f"status was not in ({statuses}) on {_day(start)}"
        before_key, added_key, resolved_key = trend_window_names(release)

        queries[before_key] = (
            f"{prefix} AND created <= {day_before} AND {open_at_start} {CREATED_DESC}"
        )
        queries[added_key] = (
            f"{prefix} AND created >= {_day(start)} AND created <= {_day(end)} "
            f"AND status was not in ({statuses}) on {_day(end + timedelta(days=1))} "
            f"{CREATED_DESC}"
        )
        queries[resolved_key] = (
            f"{prefix} AND created <= {day_before} AND {open_at_start} "
            f"AND status CHANGED to ({statuses}) during ({_day(start)}, {_day(end)}) "
            f"{CREATED_DESC}"
        )
    return queries
