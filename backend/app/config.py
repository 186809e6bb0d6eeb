"""Environment-driven settings for the dashboard backend."""

import os

from dotenv import load_dotenv

load_dotenv()

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"


def _int(env, name: str, default: int) -> int:
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw!r}. Must be an integer.")
    if value < 0:
        raise ValueError(f"Invalid {name}: {value}. Must not be negative.")
    return value


class Config:
    """Settings read from the environment (and a ``.env`` file, if present).

    The Jira service account is optional: requests may carry their own
    credentials in the ``X-Jira-*`` headers instead.
    """

    def __init__(self, env=None):
        env = os.environ if env is None else env

        self.jira_server = (env.get("JIRA_SERVER") or "").rstrip("/")
        self.jira_email = env.get("JIRA_EMAIL") or ""
        self.jira_api_token = env.get("JIRA_API_TOKEN") or ""
        self.jira_timeout = _int(env, "JIRA_TIMEOUT", 30)
        self.jira_max_retries = _int(env, "JIRA_MAX_RETRIES", 3)

        self.log_level = (env.get("LOG_LEVEL") or "INFO").upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL: {self.log_level}. Must be one of 'DEBUG', 'INFO', "
                "'WARNING', 'ERROR', 'CRITICAL'."
            )

        origins = env.get("CORS_ORIGINS") or DEFAULT_CORS_ORIGINS
        self.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

        self.reference_data_dir = env.get("REFERENCE_DATA_DIR") or None

    @property
    def has_service_account(self) -> bool:
        return all([self.jira_server, self.jira_email, self.jira_api_token])
