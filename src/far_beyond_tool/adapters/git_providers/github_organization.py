from __future__ import annotations

import json
import re
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from far_beyond_tool.domain.entities import OrganizationRepository
from far_beyond_tool.domain.errors import ProviderError
from far_beyond_tool.domain.ports import GitProviderPort


_NEXT_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*rel="next"')


class GitHubOrganizationProviderAdapter(GitProviderPort):
    def __init__(
        self,
        *,
        api_base_url: str = "https://api.github.com",
        token: str | None = None,
        timeout_seconds: float = 30.0,
        page_size: int = 100,
        urlopen_fn: Callable[..., Any] = urlopen,
    ) -> None:
        self._api_base_url = api_base_url.rstrip("/")
        self._token = token
        self._timeout_seconds = timeout_seconds
        self._page_size = page_size
        self._urlopen_fn = urlopen_fn

    def list_repositories(self, organization: str) -> list[OrganizationRepository]:
        encoded_organization = quote(organization, safe="")
        next_url: str | None = (
            f"{self._api_base_url}/orgs/{encoded_organization}/repos?per_page={self._page_size}&type=all"
        )
        repositories: list[OrganizationRepository] = []

        while next_url:
            items, next_url = self._request_page(next_url)
            for item in items:
                if not isinstance(item, dict):
                    continue
                repository = self._map_repository(item)
                if repository is not None:
                    repositories.append(repository)

        return repositories

    def _request_page(self, url: str) -> tuple[list[Any], str | None]:
        request = Request(url, headers=self._build_headers())
        try:
            with self._urlopen_fn(request, timeout=self._timeout_seconds) as response:
                content = response.read()
                link_header = response.headers.get("Link") if response.headers is not None else None
        except HTTPError as error:
            raise ProviderError(f"GitHub API request failed with HTTP {error.code} for URL: {url}") from error
        except URLError as error:
            raise ProviderError(f"GitHub API request failed for URL: {url}: {error.reason}") from error

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as error:
            raise ProviderError(f"Invalid JSON received from GitHub API for URL: {url}") from error

        if not isinstance(parsed, list):
            raise ProviderError("Unexpected GitHub API payload: repository listing must be a JSON array")

        return parsed, _next_page_url(link_header)

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "fbcli",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _map_repository(self, payload: dict[str, Any]) -> OrganizationRepository | None:
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        repo_name = name.strip()

        full_name = _string_or(payload.get("full_name"), repo_name)
        clone_url = _string_or(payload.get("clone_url"), f"https://github.com/{full_name}.git")
        ssh_url = _string_or(payload.get("ssh_url"), f"git@github.com:{full_name}.git")
        description = payload.get("description")

        return OrganizationRepository(
            name=repo_name,
            full_name=full_name,
            clone_url=clone_url,
            ssh_url=ssh_url,
            html_url=_string_or(payload.get("html_url"), f"https://github.com/{full_name}"),
            description=description.strip() if isinstance(description, str) and description.strip() else None,
            private=bool(payload.get("private", False)),
            default_branch=_string_or(payload.get("default_branch"), "main"),
            updated_at=_string_or(payload.get("updated_at"), ""),
        )


def _string_or(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def _next_page_url(link_header: str | None) -> str | None:
    if not link_header:
        return None
    match = _NEXT_LINK_PATTERN.search(link_header)
    return match.group(1) if match else None
