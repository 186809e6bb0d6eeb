"""Debug API endpoints for troubleshooting."""

from flask import Blueprint, current_app, jsonify, request

from app.api.classification import build_service, get_jira_credentials
from services.jira_search import JiraSearchError

bp = Blueprint("debug", __name__, url_prefix="/api/debug")


@bp.route("/config", methods=["GET"])
def get_config():
    """Report which Jira credentials are in effect without exposing the token."""
    settings = current_app.config["SETTINGS"]
    reference_data = current_app.config["REFERENCE_DATA"]
    from_headers = all(request.headers.get(h) for h in ("X-Jira-Server", "X-Jira-Email", "X-Jira-Token"))
    server, email, token = get_jira_credentials()

    return jsonify({
        "data": {
            "hasJiraToken": bool(token),
            "hasJiraEmail": bool(email),
            "tokenLength": len(token or ""),
            "server": server,
            "source": "headers" if from_headers else ("service_account" if server else None),
            "timeout": settings.jira_timeout,
            "maxRetries": settings.jira_max_retries,
            "teams": len(reference_data.team_portfolios),
            "backlogBuckets": [b.label for b in reference_data.backlog_buckets],
            "releases": list(reference_data.release_names),
        }
    })


@bp.route("/classify/<issue_key>", methods=["GET"])
def classify_issue(issue_key):
    """Show how the triage and backlog cascades classify one issue.

    Returns the extracted facts, the portfolio each cascade assigns, the rule
    that fired and what every rule would have returned.
    """
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    try:
        with build_service(server, email, token) as service:
            return jsonify({"data": service.explain_issue(issue_key)})
    except JiraSearchError as e:
        status = 404 if e.status_code == 404 else 502
        return jsonify({"error": str(e)}), status
    except Exception as e:
        current_app.logger.exception(f"Failed to classify {issue_key}")
        return jsonify({"error": str(e)}), 500
