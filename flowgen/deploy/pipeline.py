"""
Deployment pipeline.

Turns the generated nodes of a flow into a live site:

    validating -> creating_repository -> generating_files -> committing_files
        -> linking_project -> triggering_build -> waiting_for_build

Repository creation and file commits are required; any failure there aborts
the run. Project linking is best effort. The hosting steps are skipped
entirely when no Vercel token is configured.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from flowgen.config import Settings, settings
from flowgen.core.errors import DeploymentError, IntegrationError, InvalidRequestError
from flowgen.core.logging import get_logger, log_timing
from flowgen.deploy.project_files import deployable_pages, generate_project_files, sanitize_project_name
from flowgen.integrations.github import GitHubClient
from flowgen.integrations.retry import with_retries
from flowgen.integrations.vercel import FAILED_STATES, READY, VercelClient
from flowgen.models.schemas import (
    DeploymentRequest,
    DeploymentResult,
    DeploymentStage,
    DeploymentStatus,
    FlowNode,
    ProjectFile,
)

logger = get_logger(__name__)

T = TypeVar("T")

_SERVICE_ERRORS = (IntegrationError, httpx.HTTPError)


def make_repo_name(project_name: str, now_ms: int | None = None) -> str:
    """Unique repository name: the sanitised project name plus a millisecond timestamp."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{sanitize_project_name(project_name)}-{now_ms}"


class DeploymentPipeline:
    """Runs one deployment from validated nodes to a (possibly still building) site."""

    def __init__(
        self,
        github: GitHubClient | None,
        vercel: VercelClient | None = None,
        *,
        poll_interval: float = 5.0,
        max_wait: float = 300.0,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.github = github
        self.vercel = vercel
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.retry_attempts = retry_attempts
        self.retry_backoff = retry_backoff
        self._sleep = sleep

    async def __aenter__(self) -> DeploymentPipeline:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self.github is not None:
            await self.github.aclose()
        if self.vercel is not None:
            await self.vercel.aclose()

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    @staticmethod
    def validate(request: DeploymentRequest) -> list[FlowNode]:
        """Check the request and return the pages that will be deployed."""
        if not request.project_name.strip():
            raise InvalidRequestError("Project name is required")
        pages = deployable_pages(request.nodes)
        if not pages:
            raise InvalidRequestError("At least one page component is required for deployment")
        return pages

    async def run(self, request: DeploymentRequest) -> DeploymentResult:
        """Execute every stage and report the outcome.

        Validation problems raise ``InvalidRequestError``. Failures in later
        stages are returned as an unsuccessful result carrying the failed
        stage, the error and the logs collected so far.
        """
        pages = self.validate(request)
        project_name = request.project_name.strip()
        repo_name = make_repo_name(project_name)

        result = DeploymentResult(success=False, status=DeploymentStatus.DEPLOYING, repo_name=repo_name)
        self._log(
            result,
            f"Validated {len(pages)} page(s) for project '{project_name}'",
            "deployment_started",
            project=project_name,
            repo=repo_name,
            pages=len(pages),
        )

        vercel = self.vercel
        try:
            github = self._require_github(result)
            repo = await self._create_repository(result, github, repo_name, project_name)
            owner = repo["owner"]["login"]
            branch = repo.get("default_branch") or "main"

            files = self._generate_files(result, request.nodes, project_name)
            await self._commit_files(result, github, owner, repo_name, branch, files)

            if vercel is None:
                self._log(
                    result,
                    "Hosting provider not configured; skipping build. Code is available on GitHub.",
                    "hosting_skipped",
                    repo=repo_name,
                )
            else:
                project_id = await self._link_project(result, vercel, owner, repo_name)
                deployment = await self._trigger_build(result, vercel, repo, branch, files, project_id)
                await self._wait_for_build(result, vercel, deployment)
        except DeploymentError as e:
            return self._fail(result, e)

        result.success = True
        result.status = DeploymentStatus.SUCCESS
        result.stage = DeploymentStage.COMPLETED
        self._log(
            result,
            "Deployment finished",
            "deployment_completed",
            repo_url=result.repo_url,
            url=result.url,
            ready=result.ready,
        )
        return result

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _require_github(self, result: DeploymentResult) -> GitHubClient:
        result.stage = DeploymentStage.CREATING_REPOSITORY
        if self.github is None:
            raise DeploymentError(result.stage, "GitHub token is not configured")
        return self.github

    async def _create_repository(
        self,
        result: DeploymentResult,
        github: GitHubClient,
        repo_name: str,
        project_name: str,
    ) -> dict[str, Any]:
        stage = DeploymentStage.CREATING_REPOSITORY
        result.stage = stage
        attempts = 0

        async def create() -> dict[str, Any]:
            nonlocal attempts
            attempts += 1
            try:
                return await github.create_repository(repo_name, description=f"{project_name} - generated by FlowGen")
            except IntegrationError as e:
                # A conflict after a lost response means the earlier attempt succeeded.
                if attempts == 1 or not e.is_conflict:
                    raise
                logger.info("repository_already_created", repo=repo_name, attempt=attempts)
                return await github.get_repository(repo_name)

        try:
            with log_timing(logger, "deploy_create_repository", repo=repo_name):
                repo = await self._retry(create, "create repository")
        except _SERVICE_ERRORS as e:
            raise DeploymentError(stage, f"Failed to create repository: {e}") from e

        result.repo_url = repo.get("html_url")
        self._log(result, f"Created repository {repo.get('full_name', repo_name)}", "repository_ready", url=result.repo_url)
        return repo

    def _generate_files(self, result: DeploymentResult, nodes: list[FlowNode], project_name: str) -> list[ProjectFile]:
        result.stage = DeploymentStage.GENERATING_FILES
        files = generate_project_files(nodes, project_name)
        self._log(result, f"Generated {len(files)} project files", "project_files_generated", count=len(files))
        return files

    async def _commit_files(
        self,
        result: DeploymentResult,
        github: GitHubClient,
        owner: str,
        repo_name: str,
        branch: str,
        files: list[ProjectFile],
    ) -> None:
        stage = DeploymentStage.COMMITTING_FILES
        result.stage = stage

        with log_timing(logger, "deploy_commit_files", repo=repo_name, count=len(files)):
            for file in files:
                try:
                    await self._retry(
                        lambda f=file: github.upsert_file(
                            owner, repo_name, f.path, f.content, f"Add {f.path}", branch=branch
                        ),
                        f"commit {file.path}",
                    )
                except _SERVICE_ERRORS as e:
                    raise DeploymentError(stage, f"Failed to commit {file.path}: {e}") from e
                logger.debug("file_committed", repo=repo_name, path=file.path)

        self._log(result, f"Committed {len(files)} files to {branch}", "files_committed", count=len(files))

    async def _link_project(
        self,
        result: DeploymentResult,
        vercel: VercelClient,
        owner: str,
        repo_name: str,
    ) -> str | None:
        result.stage = DeploymentStage.LINKING_PROJECT
        try:
            project = await self._retry(
                lambda: vercel.ensure_project(repo_name, f"{owner}/{repo_name}"),
                "link project",
            )
        except _SERVICE_ERRORS as e:
            logger.warning("project_link_failed", repo=repo_name, error=str(e))
            result.logs.append(f"Could not link hosting project ({e}); continuing without it")
            return None

        project_id = project.get("id")
        self._log(result, f"Linked hosting project {project.get('name', repo_name)}", "project_linked", project_id=project_id)
        return project_id

    async def _trigger_build(
        self,
        result: DeploymentResult,
        vercel: VercelClient,
        repo: dict[str, Any],
        branch: str,
        files: list[ProjectFile],
        project_id: str | None,
    ) -> dict[str, Any]:
        stage = DeploymentStage.TRIGGERING_BUILD
        result.stage = stage
        repo_name = repo["name"]

        try:
            deployment = await self._retry(
                lambda: vercel.create_deployment_from_git(
                    repo_name,
                    owner=repo["owner"]["login"],
                    repo=repo_name,
                    ref=branch,
                    repo_id=repo.get("id"),
                    project_id=project_id,
                ),
                "trigger git deployment",
            )
        except _SERVICE_ERRORS as e:
            logger.warning("git_deployment_rejected", repo=repo_name, error=str(e))
            result.logs.append(f"Build from GitHub was rejected ({e}); uploading files directly")
            try:
                deployment = await self._retry(
                    lambda: vercel.create_deployment_from_files(repo_name, files, project_id=project_id),
                    "trigger file deployment",
                )
            except _SERVICE_ERRORS as upload_error:
                raise DeploymentError(stage, f"Failed to trigger build: {upload_error}") from upload_error

        result.deployment_id = deployment.get("id")
        if deployment.get("url"):
            result.url = f"https://{deployment['url']}"
        self._log(result, f"Build triggered ({result.deployment_id})", "build_triggered", deployment_id=result.deployment_id)
        return deployment

    async def _wait_for_build(
        self,
        result: DeploymentResult,
        vercel: VercelClient,
        deployment: dict[str, Any],
    ) -> None:
        stage = DeploymentStage.WAITING_FOR_BUILD
        result.stage = stage
        deployment_id = deployment.get("id")
        waited = 0.0

        while True:
            state = deployment.get("readyState")
            if state == READY:
                result.ready = True
                if deployment.get("url"):
                    result.url = f"https://{deployment['url']}"
                self._log(result, f"Build ready at {result.url}", "build_ready", url=result.url, waited=waited)
                return
            if state in FAILED_STATES:
                reason = deployment.get("errorMessage") or state.lower()
                raise DeploymentError(stage, f"Build failed: {reason}")
            if waited >= self.max_wait:
                self._log(
                    result,
                    f"Build still running after {waited:.0f}s; it will finish in the background",
                    "build_wait_timeout",
                    state=state,
                    waited=waited,
                )
                return

            delay = min(self.poll_interval, self.max_wait - waited)
            await self._sleep(delay)
            waited += delay
            logger.debug("build_polled", deployment_id=deployment_id, state=state, waited=waited)

            try:
                deployment = await self._retry(
                    lambda: vercel.get_deployment(deployment_id),
                    "poll deployment",
                )
            except _SERVICE_ERRORS as e:
                raise DeploymentError(stage, f"Failed to check build status: {e}") from e

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _retry(self, operation: Callable[[], Awaitable[T]], description: str) -> T:
        return await with_retries(
            operation,
            attempts=self.retry_attempts,
            backoff=self.retry_backoff,
            description=description,
            sleep=self._sleep,
        )

    @staticmethod
    def _log(result: DeploymentResult, message: str, event: str, **context: Any) -> None:
        result.logs.append(message)
        logger.info(event, stage=result.stage.value, **context)

    @staticmethod
    def _fail(result: DeploymentResult, error: DeploymentError) -> DeploymentResult:
        result.success = False
        result.status = DeploymentStatus.ERROR
        result.stage = DeploymentStage(error.stage)
        result.error = str(error)
        result.logs.append(f"Deployment failed: {error}")
        logger.error("deployment_failed", stage=result.stage.value, error=str(error), repo_url=result.repo_url)
        return result


def create_pipeline(config: Settings | None = None) -> DeploymentPipeline:
    """Build a pipeline with clients for whichever services are configured."""
    config = config or settings
    github = (
        GitHubClient(config.github_token, base_url=config.github_api_url, timeout=config.http_timeout)
        if config.github_token
        else None
    )
    vercel = (
        VercelClient(
            config.vercel_token,
            team_id=config.vercel_team_id,
            base_url=config.vercel_api_url,
            timeout=config.http_timeout,
        )
        if config.hosting_enabled
        else None
    )
    return DeploymentPipeline(
        github,
        vercel,
        poll_interval=config.deploy_poll_interval,
        max_wait=config.deploy_max_wait,
        retry_attempts=config.http_max_retries,
        retry_backoff=config.http_retry_backoff,
    )
