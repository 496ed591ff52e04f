# src/jira_worklog_report/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import httpx
from dotenv import load_dotenv, find_dotenv

DEFAULT_DOMAIN = "https://unis-team-pll053jl.atlassian.net"
PROJECT_KEY = "UNIS"
RESULT_CAP = 100
OUTPUT_FILENAME = "rapport_client.html"


class ConfigurationError(RuntimeError):
    """Required settings are missing; raised before any network call."""


@dataclass(frozen=True)
class Settings:
    base_url: str
    email: str
    api_token: str
    project_key: str = PROJECT_KEY
    result_cap: int = RESULT_CAP
    timeout_s: float = 30.0
    output_path: Path = Path(OUTPUT_FILENAME)

    @classmethod
    def from_env(cls, env_path: Optional[str | Path] = None) -> "Settings":
        # an explicit env_path is the only file consulted
        if env_path:
            p = Path(env_path)
            if p.is_file():
                load_dotenv(p, override=False)
        else:
            p = find_dotenv(usecwd=True)
            if p:
                load_dotenv(p, override=False)

        base_url = os.getenv("JIRA_DOMAIN") or DEFAULT_DOMAIN
        email = os.getenv("JIRA_EMAIL")
        api_token = os.getenv("JIRA_TOKEN")
        timeout_s = float(os.getenv("JIRA_TIMEOUT_S") or 30.0)

        missing = []
        if not email:
            missing.append("JIRA_EMAIL")
        if not api_token:
            missing.append("JIRA_TOKEN")
        if missing:
            raise ConfigurationError(f"Missing required env var(s): {', '.join(missing)}")

        return cls(
            base_url=base_url.rstrip("/"),
            email=email,
            api_token=api_token,
            timeout_s=timeout_s,
        )

    def build_client(self, transport: httpx.BaseTransport | None = None) -> httpx.Client:
        headers = {"Accept": "application/json"}
        return httpx.Client(
            base_url=self.base_url,
            auth=httpx.BasicAuth(self.email, self.api_token),
            headers=headers,
            timeout=httpx.Timeout(self.timeout_s),
            transport=transport,
        )
