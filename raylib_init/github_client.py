"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads

It is only used to resolve `ref: latest` to the dependency's newest release
tag; cloning itself is done with the git CLI.
"""

from __future__ import annotations

import re
from typing import Any

import requests

_GITHUB_URL = re.compile(
    r"^(?:https?://github\.com/|git@github\.com:)(?P<owner>[^/\s]+)/(?P<name>[^/\s]+?)(?:\.git)?/?$"
)


class GitHubError(RuntimeError):
    pass


def parse_github_url(url: str) -> tuple[str, str]:
    """
    Return (owner, name) for an HTTPS or SSH GitHub repository URL.
    """
    m = _GITHUB_URL.match(url.strip())
    if m is None:
        raise GitHubError(f"Not a GitHub repository URL: {url}")
    return m.group("owner"), m.group("name")


class GitHubClient:
    def __init__(self, token: str | None = None, api_base: str = "https://api.github.com") -> None:
        self._token = (token or "").strip() or None
        self._api_base = api_base.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "raylib-init",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, path: str) -> Any:
        try:
            r = requests.get(f"{self._api_base}{path}", headers=self._headers(), timeout=30)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub request {path} failed: {e}") from e
        if not r.ok:
            try:
                message = r.json().get("message", r.text)
            except (ValueError, AttributeError):
                message = r.text
            raise GitHubError(f"GitHub API error {r.status_code} {path}: {message}")
        return r.json()

    def get_latest_release_tag(self, owner: str, name: str) -> str:
        """
        Return the tag name of the latest published (non-prerelease) release.
        """
        data = self._get(f"/repos/{owner}/{name}/releases/latest")
        tag = data.get("tag_name") if isinstance(data, dict) else None
        if not tag:
            raise GitHubError(f"Latest release of {owner}/{name} has no tag name.")
        return str(tag)
