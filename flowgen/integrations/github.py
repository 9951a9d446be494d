"""GitHub REST client for repository provisioning and file commits."""

from __future__ import annotations

import base64
from typing import Any

import httpx

from flowgen.core.errors import IntegrationError
from flowgen.core.logging import get_logger
from flowgen.integrations.http import raise_for_status

logger = get_logger(__name__)

SERVICE = "github"


class GitHubClient:
    """Async GitHub API client.

    Usable as an async context manager; the underlying ``httpx.AsyncClient``
    can be injected for tests.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "FlowGen/0.2",
            },
            timeout=timeout,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------

    async def create_repository(
        self,
        name: str,
        description: str = "",
        private: bool = False,
        auto_init: bool = True,
    ) -> dict[str, Any]:
        """Create a repository owned by the token's user.

        ``auto_init`` makes GitHub create the default branch with a README so
        that files can be committed through the contents API right away.
        """
        response = await self._client.post(
            "/user/repos",
            json={
                "name": name,
                "description": description,
                "private": private,
                "auto_init": auto_init,
            },
        )
        raise_for_status(response, SERVICE, f"Creating repository {name}")
        data = response.json()
        logger.info("github_repository_created", repo=data.get("full_name"), url=data.get("html_url"))
        return data

    async def get_repository(self, name: str, owner: str | None = None) -> dict[str, Any]:
        """Fetch a repository; ``owner`` defaults to the token's user."""
        if owner is None:
            response = await self._client.get("/user")
            raise_for_status(response, SERVICE, "Reading authenticated user")
            owner = response.json()["login"]
        response = await self._client.get(f"/repos/{owner}/{name}")
        raise_for_status(response, SERVICE, f"Fetching repository {owner}/{name}")
        return response.json()

    # -------------------------------------------------------------------------
    # Contents
    # -------------------------------------------------------------------------

    async def get_file_sha(self, owner: str, repo: str, path: str) -> str | None:
        """Return the blob sha of ``path``, or None when the file does not exist."""
        response = await self._client.get(f"/repos/{owner}/{repo}/contents/{path}")
        if response.status_code == 404:
            return None
        raise_for_status(response, SERVICE, f"Reading {path}")
        data = response.json()
        if isinstance(data, list):
            raise IntegrationError(SERVICE, f"{path} is a directory")
        return data.get("sha")

    async def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        sha: str | None = None,
        branch: str | None = None,
    ) -> dict[str, Any]:
        """Create or update a single file through the contents API."""
        payload: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if sha:
            payload["sha"] = sha
        if branch:
            payload["branch"] = branch
        response = await self._client.put(f"/repos/{owner}/{repo}/contents/{path}", json=payload)
        raise_for_status(response, SERVICE, f"Committing {path}")
        return response.json()

    async def upsert_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> dict[str, Any]:
        """Commit ``path``, updating it in place when it already exists.

        Safe to repeat: a retried commit finds the sha left by an earlier
        attempt and updates instead of failing with 422.
        """
        sha = await self.get_file_sha(owner, repo, path)
        return await self.put_file(owner, repo, path, content, message, sha=sha, branch=branch)
