"""
Vercel API client for project linking and deployments.

Covers the calls the deployment pipeline needs: create/link a project to a
GitHub repository, start a deployment (from git or from inline files) and
read a deployment's build state.
"""

from __future__ import annotations

from typing import Any

import httpx

from flowgen.core.errors import IntegrationError
from flowgen.core.logging import get_logger
from flowgen.integrations.http import raise_for_status
from flowgen.models.schemas import ProjectFile

logger = get_logger(__name__)

SERVICE = "vercel"

# Terminal deployment states reported in ``readyState``.
READY = "READY"
FAILED_STATES = frozenset({"ERROR", "CANCELED"})


class VercelClient:
    """
    Async Vercel API client.

    Adds the ``teamId`` query parameter to every call when a team is
    configured.
    """

    def __init__(
        self,
        access_token: str,
        team_id: str | None = None,
        base_url: str = "https://api.vercel.com",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.access_token = access_token
        self.team_id = team_id or None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    async def __aenter__(self) -> VercelClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _params(self, **params: Any) -> dict[str, Any]:
        """Add team ID to params if configured."""
        if self.team_id:
            params["teamId"] = self.team_id
        return params

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def get_project(self, name: str) -> dict[str, Any]:
        response = await self._client.get(f"/v9/projects/{name}", params=self._params())
        raise_for_status(response, SERVICE, f"Fetching project {name}")
        return response.json()

    async def create_project(
        self,
        name: str,
        repo_full_name: str | None = None,
        framework: str = "nextjs",
    ) -> dict[str, Any]:
        """Create a project, linked to a GitHub repository when one is given."""
        payload: dict[str, Any] = {"name": name, "framework": framework}
        if repo_full_name:
            payload["gitRepository"] = {"type": "github", "repo": repo_full_name}
        response = await self._client.post("/v10/projects", json=payload, params=self._params())
        raise_for_status(response, SERVICE, f"Creating project {name}")
        return response.json()

    async def ensure_project(
        self,
        name: str,
        repo_full_name: str | None = None,
        framework: str = "nextjs",
    ) -> dict[str, Any]:
        """Create the project, or return the existing one on a name conflict (409)."""
        try:
            project = await self.create_project(name, repo_full_name, framework)
        except IntegrationError as e:
            if e.status_code != 409:
                raise
            logger.info("vercel_project_exists", project=name)
            return await self.get_project(name)
        logger.info("vercel_project_created", project=name, project_id=project.get("id"))
        return project

    # -------------------------------------------------------------------------
    # Deployments
    # -------------------------------------------------------------------------

    async def create_deployment_from_git(
        self,
        name: str,
        owner: str,
        repo: str,
        ref: str = "main",
        repo_id: int | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        """Start a production deployment that builds the given git ref."""
        git_source: dict[str, Any] = {"type": "github", "ref": ref}
        if repo_id is not None:
            git_source["repoId"] = repo_id
        else:
            git_source["org"] = owner
            git_source["repo"] = repo
        payload: dict[str, Any] = {
            "name": name,
            "target": "production",
            "gitSource": git_source,
            "projectSettings": {"framework": "nextjs"},
        }
        if project_id:
            payload["project"] = project_id
        response = await self._client.post(
            "/v13/deployments",
            json=payload,
            params=self._params(skipAutoDetectionConfirmation="1"),
        )
        raise_for_status(response, SERVICE, "Creating git deployment")
        return response.json()

    async def create_deployment_from_files(
        self,
        name: str,
        files: list[ProjectFile],
        project_id: str | None = None,
    ) -> dict[str, Any]:
        """Start a production deployment by uploading the files inline."""
        payload: dict[str, Any] = {
            "name": name,
            "target": "production",
            "files": [{"file": f.path, "data": f.content} for f in files],
            "projectSettings": {"framework": "nextjs"},
        }
        if project_id:
            payload["project"] = project_id
        response = await self._client.post(
            "/v13/deployments",
            json=payload,
            params=self._params(skipAutoDetectionConfirmation="1"),
        )
        raise_for_status(response, SERVICE, "Creating file deployment")
        return response.json()

    async def get_deployment(self, deployment_id: str) -> dict[str, Any]:
        response = await self._client.get(f"/v13/deployments/{deployment_id}", params=self._params())
        raise_for_status(response, SERVICE, f"Fetching deployment {deployment_id}")
        return response.json()
