from __future__ import annotations
import logging
from typing import Any, Optional

import httpx

from .config import Settings

log = logging.getLogger(__name__)

FIELD_PATH = "/rest/api/3/field"
SEARCH_PATH = "/rest/api/3/search/jql"


class JiraTransportError(RuntimeError):
    """Network, auth or HTTP failure talking to Jira. Always fatal for the run."""


def resolve_field_id(catalog: list[dict[str, Any]], name: str) -> Optional[str]:
    """Return the id of the first field whose name matches exactly, else None."""
    for field in catalog:
        if isinstance(field, dict) and field.get("name") == name:
            return field.get("id")
    return None


class JiraClient:
    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self.settings = settings
        self._owns_client = client is None
        self.client = client or settings.build_client()

    # lifecycle
    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _send(self, method: str, path: str, **kwargs) -> Any:
        try:
            r = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise JiraTransportError(f"Jira {path} request failed: {e}") from e
        # httpx-Fehler klarer machen
        if r.status_code >= 400:
            raise JiraTransportError(f"Jira {path} returned {r.status_code}. Body: {r.text[:500]}")
        try:
            return r.json()
        except ValueError as e:
            raise JiraTransportError(f"Jira {path} returned non-JSON body: {r.text[:200]}") from e

    # API
    def get_fields(self) -> list[dict[str, Any]]:
        return self._send("GET", FIELD_PATH) or []

    def find_field_id(self, name: str) -> Optional[str]:
        field_id = resolve_field_id(self.get_fields(), name)
        if field_id is None:
            log.warning("Field not found, continuing without it", extra={"field": name})
        else:
            log.info("Field resolved", extra={"field": name, "field_id": field_id})
        return field_id

    def search_issues(
        self,
        *,
        jql: str,
        fields: list[str] | None = None,
        max_results: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Single POST against /rest/api/3/search/jql; returns the first page only.
        Issues beyond max_results are not fetched.
        """
        if max_results is None:
            max_results = self.settings.result_cap

        payload: dict[str, Any] = {"jql": jql, "maxResults": max_results}
        if fields is not None:
            payload["fields"] = fields

        data = self._send("POST", SEARCH_PATH, json=payload) or {}
        issues = data.get("issues", []) or []

        total = data.get("total")
        truncated = (
            data.get("isLast") is False
            or bool(data.get("nextPageToken"))
            or (total is not None and total > len(issues))
        )
        if truncated:
            log.warning(
                "Search result truncated at first page",
                extra={"returned": len(issues), "max_results": max_results, "total": total},
            )
        return issues


def quote_jql_str(s: str) -> str:
    # minimal robustes Quoting (Doppelte Anführungszeichen escapen)
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


__all__ = [
    "JiraClient",
    "JiraTransportError",
    "resolve_field_id",
    "quote_jql_str",
    "FIELD_PATH",
    "SEARCH_PATH",
]
