"""Bug classification API endpoints."""

from flask import Blueprint, current_app, jsonify, request

from services.bug_dashboard import BugDashboardService
from services.jira_search import JiraSearchClient

bp = Blueprint("classification", __name__, url_prefix="/api/classification")


def get_jira_credentials():
    """Extract Jira credentials from request headers.

    Falls back to the configured service account when the headers are absent.
    """
    server = request.headers.get("X-Jira-Server", "").rstrip("/")
    email = request.headers.get("X-Jira-Email")
    token = request.headers.get("X-Jira-Token")

    if all([server, email, token]):
        return server, email, token

    settings = current_app.config["SETTINGS"]
    if settings.has_service_account:
        return settings.jira_server, settings.jira_email, settings.jira_api_token

    return None, None, None


def build_service(server: str, email: str, token: str) -> BugDashboardService:
    settings = current_app.config["SETTINGS"]
    client = JiraSearchClient(
        server, email, token,
        timeout=settings.jira_timeout,
        max_retries=settings.jira_max_retries,
    )
    return BugDashboardService(client, current_app.config["REFERENCE_DATA"])


def _window_response(result):
    body = {"data": result.issues}
    if result.error:
        body["error"] = result.error
    return jsonify(body)


@bp.route("/triage", methods=["GET"])
def get_triage():
    """Get bugs from a release still awaiting triage at its end date.

    Query params:
        - release: Release name (e.g., "april"); defaults to the current release
    """
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            return _window_response(service.get_triage_bugs(request.args.get("release")))
    except Exception as e:
        current_app.logger.exception("Failed to build triage view")
        return jsonify({"error": str(e)}), 500


@bp.route("/bugs", methods=["GET"])
def get_bugs():
    """Get every bug created during a release, with triage status."""
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            return _window_response(service.get_bugs(request.args.get("release")))
    except Exception as e:
        current_app.logger.exception("Failed to build bugs view")
        return jsonify({"error": str(e)}), 500


@bp.route("/backlog", methods=["GET"])
def get_backlog():
    """Get the open bug backlog grouped into backlog buckets.

    Query params:
        - release: "all" (default) for the current backlog, or a release
          name for the backlog at that release's cutoff
    """
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            return _window_response(service.get_backlog_bugs(request.args.get("release", "all")))
    except Exception as e:
        current_app.logger.exception("Failed to build backlog view")
        return jsonify({"error": str(e)}), 500


@bp.route("/trend", methods=["GET"])
def get_trend():
    """Get classified issues for every backlog trend window.

    Returns:
        - One key per window: before<Release>, <release>, <release>Resolved
    """
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            return jsonify({"data": service.get_backlog_trend()})
    except Exception as e:
        current_app.logger.exception("Failed to build backlog trend")
        return jsonify({"error": str(e)}), 500


@bp.route("/trend/summary", methods=["GET"])
def get_trend_summary():
    """Get the per-portfolio backlog trend tables."""
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            return jsonify({"data": service.get_trend_summary()})
    except Exception as e:
        current_app.logger.exception("Failed to build trend summary")
        return jsonify({"error": str(e)}), 500


@bp.route("/backlog/summary", methods=["GET"])
def get_backlog_summary():
    """Get per-bucket backlog totals, old-bug counts and the Engineering split."""
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            summary = service.get_backlog_summary(request.args.get("release", "all"))
            error = summary.pop("error", None)
            body = {"data": summary}
            if error:
                body["error"] = error
            return jsonify(body)
    except Exception as e:
        current_app.logger.exception("Failed to build backlog summary")
        return jsonify({"error": str(e)}), 500


@bp.route("/triage/summary", methods=["GET"])
def get_triage_summary():
    """Get per-portfolio triage percentages and headline bug metrics."""
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            summary = service.get_triage_summary(request.args.get("release"))
            error = summary.pop("error", None)
            body = {"data": summary}
            if error:
                body["error"] = error
            return jsonify(body)
    except Exception as e:
        current_app.logger.exception("Failed to build triage summary")
        return jsonify({"error": str(e)}), 500


@bp.route("/releases", methods=["GET"])
def get_releases():
    """List the release calendar. Needs no Jira credentials."""
    reference_data = current_app.config["REFERENCE_DATA"]
    releases = [
        {
            "name": r.name,
            "label": r.label,
            "start": r.start.isoformat(),
            "end": r.end.isoformat(),
            "trendStart": r.trend_start.isoformat(),
            "trendEnd": r.trend_end.isoformat(),
        }
        for r in reference_data.releases
    ]
    return jsonify({"data": {"releases": releases, "default": reference_data.default_release}})
