"""GitHub Releases API client.

A small synchronous httpx client for creating releases. Connection
failures are retried by the transport; API errors are surfaced as
GitHubError with the message GitHub returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx

from release_flow.exceptions import GitHubError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
DEFAULT_RETRIES = 3


@dataclass(frozen=True)
class ReleaseInfo:
    """A created release."""

    id: int
    html_url: str
    upload_url: str


class GitHubClient:
    """Client for the releases endpoint of one repository.

    Args:
        token: API token
        repository: ``owner/name``
        api_url: API base URL (GitHub Enterprise uses ``https://host/api/v3``)
        transport: Custom transport, mainly for tests
    """

    def __init__(
        self,
        token: str,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not token:
            raise GitHubError("A GitHub token is required to create releases")
        if repository.count("/") != 1:
            raise GitHubError(f"Invalid repository {repository!r}, expected 'owner/name'")

        self.repository = repository
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=DEFAULT_TIMEOUT,
            transport=transport or httpx.HTTPTransport(retries=DEFAULT_RETRIES),
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def create_release(
        self,
        tag: str,
        name: str,
        body: str,
        *,
        draft: bool = False,
        prerelease: bool = False,
    ) -> ReleaseInfo:
        """Create a release for an existing tag.

        Args:
            tag: Tag name
            name: Release title
            body: Release notes (markdown); defaults to ``Release <tag>`` when empty
            draft: Create as draft
            prerelease: Mark as pre-release

        Returns:
            The created release

        Raises:
            GitHubError: If the request fails or the API rejects it
        """
        payload = {
            "tag_name": tag,
            "name": name,
            "body": body or f"Release {tag}",
            "draft": draft,
            "prerelease": prerelease,
        }
        logger.info("Creating release %s", name)
        data = self._post(f"/repos/{self.repository}/releases", payload)
        return ReleaseInfo(
            id=int(data["id"]),
            html_url=str(data.get("html_url", "")),
            upload_url=str(data.get("upload_url", "")),
        )

    def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise GitHubError(f"Request to {url} failed: {e}") from e

        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise GitHubError(
                f"Failed to create release: {message}",
                status_code=response.status_code,
            )
        return response.json()
