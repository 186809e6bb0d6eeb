"""Paginated Jira issue search."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "/rest/api/3/search"
PAGE_SIZE = 100
MAX_PAGES = 10

SEARCH_FIELDS = ",".join([
    "id", "key", "summary", "status", "priority", "assignee", "reporter",
    "created", "updated", "resolved", "labels", "components", "fixVersions",
    "customfield_12000", "customfield_15072", "project",
])


class JiraSearchError(Exception):
    """Raised when a Jira request fails or returns a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JiraSearchClient:
    """Runs JQL searches against Jira Cloud and merges the paged results."""

    def __init__(self, server: str, email: str, token: str,
                 timeout: int = 30, max_retries: int = 3,
                 fields: str = SEARCH_FIELDS, max_workers: int = 6):
        self.server = server.rstrip("/")
        self.email = email
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.fields = fields
        self.max_workers = max_workers
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Session with basic auth and bounded retry on transient statuses."""
        session = requests.Session()
        retry_strategy = Retry(
            total=self.max_retries,
            status_forcelist=[429, 500, 502, 503, 504],
            backoff_factor=1,
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.auth = (self.email, self.token)
        session.headers.update({"Accept": "application/json"})
        return session

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _request(self, endpoint: str, params: Optional[dict] = None) -> dict:
        """Make authenticated request to Jira API."""
        try:
            response = self.session.get(
                f"{self.server}{endpoint}",
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise JiraSearchError(f"Jira request failed: {e}") from e

        if not response.ok:
            raise JiraSearchError(
                f"Jira API responded with status {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise JiraSearchError(
                f"Invalid JSON from Jira: {e}", status_code=response.status_code
            ) from e
        if not isinstance(data, dict):
            raise JiraSearchError(
                f"Unexpected Jira response body: {type(data).__name__}",
                status_code=response.status_code,
            )
        return data

    def _paginate(self, jql: str, page_size: int, max_pages: int,
                  label: Optional[str] = None, resilient: bool = False) -> list:
        issues = []
        start_at = 0
        label = label or "search"

        for page in range(max_pages):
            logger.debug(f"Fetching {label} page {page + 1}/{max_pages} (startAt: {start_at})")
            try:
                data = self._request(SEARCH_ENDPOINT, params={
                    "jql": jql,
                    "fields": self.fields,
                    "maxResults": page_size,
                    "startAt": start_at,
                })
            except JiraSearchError as e:
                if not resilient:
                    raise
                logger.error(f"Jira search failed for {label} on page {page + 1}: {e}")
                break

            page_issues = data.get("issues") or []
            issues.extend(page_issues)

            total = data.get("total")
            if len(page_issues) < page_size:
                break
            if total is not None and start_at + len(page_issues) >= total:
                break

            start_at += page_size

        logger.info(f"Fetched {len(issues)} issues for {label}")
        return issues

    def search(self, jql: str, page_size: int = PAGE_SIZE, max_pages: int = MAX_PAGES) -> list:
        """Fetch every issue matching ``jql`` up to ``max_pages`` pages.

        Args:
            jql: JQL query string
            page_size: Issues requested per page (Jira caps this at 100)
            max_pages: Hard ceiling on the number of pages fetched

        Returns:
            Raw issue dicts in the order Jira returned them.

        Raises:
            JiraSearchError: On any transport error or non-success response.
        """
        return self._paginate(jql, page_size, max_pages)

    def search_many(self, queries: dict, page_size: int = PAGE_SIZE,
                    max_pages: int = MAX_PAGES) -> dict:
        """Run several named searches in parallel.

        A failing page is logged and ends that query only; whatever it had
        already collected is kept. The result preserves the order of
        ``queries``.
        """
        if not queries:
            return {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                name: executor.submit(self._paginate, jql, page_size, max_pages, name, True)
                for name, jql in queries.items()
            }
            return {name: futures[name].result() for name in queries}

    def get_issue(self, issue_key: str) -> dict:
        """Fetch a single issue with the same field set as searches."""
        return self._request(f"/rest/api/3/issue/{issue_key}", params={"fields": self.fields})
