"""Tests for the deployment pipeline with mocked GitHub and Vercel clients."""

import re
from unittest.mock import AsyncMock

import httpx
import pytest

from flowgen.core.errors import IntegrationError, InvalidRequestError
from flowgen.deploy.pipeline import DeploymentPipeline, create_pipeline, make_repo_name
from flowgen.config import Settings
from flowgen.models.schemas import DeploymentRequest, DeploymentStage, DeploymentStatus, NodeType
from tests.conftest import make_node

REPO = {
    "id": 42,
    "name": "shop",
    "full_name": "octo/shop",
    "html_url": "https://github.com/octo/shop",
    "owner": {"login": "octo"},
    "default_branch": "main",
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def github():
    client = AsyncMock()
    client.create_repository.return_value = REPO
    client.upsert_file.return_value = {}
    return client


@pytest.fixture
def vercel():
    client = AsyncMock()
    client.ensure_project.return_value = {"id": "prj_1", "name": "shop"}
    client.create_deployment_from_git.return_value = {
        "id": "dpl_1",
        "url": "shop.vercel.app",
        "readyState": "QUEUED",
    }
    client.get_deployment.side_effect = [
        {"id": "dpl_1", "url": "shop.vercel.app", "readyState": "BUILDING"},
        {"id": "dpl_1", "url": "shop.vercel.app", "readyState": "READY"},
    ]
    return client


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def request_body(page_node):
    return DeploymentRequest(project_name="Shop", nodes=[page_node])


def _pipeline(github, vercel, sleep, **kwargs) -> DeploymentPipeline:
    options = {"poll_interval": 5.0, "max_wait": 60.0, "retry_attempts": 3, "retry_backoff": 1.0}
    options.update(kwargs)
    return DeploymentPipeline(github, vercel, sleep=sleep, **options)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    @pytest.mark.asyncio
    async def test_project_name_required(self, github, vercel, sleep, page_node):
        pipeline = _pipeline(github, vercel, sleep)
        with pytest.raises(InvalidRequestError, match="Project name is required"):
            await pipeline.run(DeploymentRequest(project_name="  ", nodes=[page_node]))
        github.create_repository.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_page_with_code_required(self, github, vercel, sleep, users_schema):
        nodes = [
            make_node("p1", NodeType.PAGE, "Empty page"),
            make_node("d1", NodeType.DATA, "Users", schema=users_schema),
        ]
        pipeline = _pipeline(github, vercel, sleep)
        with pytest.raises(InvalidRequestError, match="At least one page component is required"):
            await pipeline.run(DeploymentRequest(project_name="Shop", nodes=nodes))

    def test_repo_name(self):
        assert make_repo_name("My Shop!", now_ms=1700000000000) == "my-shop-1700000000000"
        assert re.fullmatch(r"flowgen-app-\d{13}", make_repo_name("???"))


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------


class TestSuccessfulRuns:
    @pytest.mark.asyncio
    async def test_full_run_waits_for_ready(self, github, vercel, sleep, request_body):
        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is True
        assert result.status == DeploymentStatus.SUCCESS
        assert result.stage == DeploymentStage.COMPLETED
        assert result.ready is True
        assert result.url == "https://shop.vercel.app"
        assert result.repo_url == "https://github.com/octo/shop"
        assert result.deployment_id == "dpl_1"
        assert re.fullmatch(r"shop-\d{13}", result.repo_name)
        assert [c.args[0] for c in sleep.await_args_list] == [5.0, 5.0]
        assert any("Build ready" in line for line in result.logs)

    @pytest.mark.asyncio
    async def test_every_file_committed_to_default_branch(self, github, vercel, sleep, request_body):
        await _pipeline(github, vercel, sleep).run(request_body)

        paths = [c.args[2] for c in github.upsert_file.await_args_list]
        assert "package.json" in paths
        assert "app/page.tsx" in paths
        assert paths[-1] == "README.md"
        for call in github.upsert_file.await_args_list:
            assert call.args[0] == "octo"
            assert call.kwargs["branch"] == "main"

    @pytest.mark.asyncio
    async def test_build_triggered_from_git_with_linked_project(self, github, vercel, sleep, request_body):
        result = await _pipeline(github, vercel, sleep).run(request_body)

        vercel.ensure_project.assert_awaited_once_with(result.repo_name, f"octo/{result.repo_name}")
        kwargs = vercel.create_deployment_from_git.await_args.kwargs
        assert kwargs["owner"] == "octo"
        assert kwargs["repo_id"] == 42
        assert kwargs["ref"] == "main"
        assert kwargs["project_id"] == "prj_1"
        vercel.create_deployment_from_files.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hosting_skipped_without_vercel(self, github, sleep, request_body):
        result = await _pipeline(github, None, sleep).run(request_body)

        assert result.success is True
        assert result.stage == DeploymentStage.COMPLETED
        assert result.repo_url == "https://github.com/octo/shop"
        assert result.url is None
        assert result.ready is False
        assert any("skipping build" in line for line in result.logs)

    @pytest.mark.asyncio
    async def test_transient_repository_error_is_retried(self, github, vercel, sleep, request_body):
        github.create_repository.side_effect = [
            IntegrationError("github", "Bad gateway", status_code=502),
            REPO,
        ]

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is True
        assert github.create_repository.await_count == 2
        assert sleep.await_args_list[0].args[0] == 1.0

    @pytest.mark.asyncio
    async def test_repository_created_before_timeout_is_reused(self, github, vercel, sleep, request_body):
        github.create_repository.side_effect = [
            httpx.ReadTimeout("timed out"),
            IntegrationError("github", "name already exists on this account", status_code=422),
        ]
        github.get_repository.return_value = REPO

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is True
        assert result.repo_url == "https://github.com/octo/shop"
        github.get_repository.assert_awaited_once_with(result.repo_name)
        assert github.upsert_file.await_count > 0

    @pytest.mark.asyncio
    async def test_ready_without_url_keeps_trigger_url(self, github, vercel, sleep, request_body):
        vercel.get_deployment.side_effect = [{"id": "dpl_1", "readyState": "READY"}]

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.ready is True
        assert result.url == "https://shop.vercel.app"

    @pytest.mark.asyncio
    async def test_ready_without_any_url(self, github, vercel, sleep, request_body):
        vercel.create_deployment_from_git.return_value = {"id": "d", "readyState": "READY"}

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.ready is True
        assert result.url is None

    @pytest.mark.asyncio
    async def test_link_failure_is_not_fatal(self, github, vercel, sleep, request_body):
        vercel.ensure_project.side_effect = IntegrationError("vercel", "Install the GitHub app", status_code=400)

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is True
        assert vercel.create_deployment_from_git.await_args.kwargs["project_id"] is None
        assert any("Could not link hosting project" in line for line in result.logs)

    @pytest.mark.asyncio
    async def test_rejected_git_build_falls_back_to_file_upload(self, github, vercel, sleep, request_body):
        vercel.create_deployment_from_git.side_effect = IntegrationError(
            "vercel", "Repository not connected", status_code=400
        )
        vercel.create_deployment_from_files.return_value = {
            "id": "dpl_files",
            "url": "shop-files.vercel.app",
            "readyState": "READY",
        }

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is True
        assert result.ready is True
        assert result.url == "https://shop-files.vercel.app"
        assert result.deployment_id == "dpl_files"
        uploaded = vercel.create_deployment_from_files.await_args.args[1]
        assert any(f.path == "app/page.tsx" for f in uploaded)
        vercel.get_deployment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bounded_wait_returns_without_ready(self, github, vercel, sleep, request_body):
        vercel.get_deployment.side_effect = None
        vercel.get_deployment.return_value = {"id": "dpl_1", "url": "shop.vercel.app", "readyState": "BUILDING"}

        result = await _pipeline(github, vercel, sleep, poll_interval=4.0, max_wait=10.0).run(request_body)

        assert result.success is True
        assert result.ready is False
        assert result.url == "https://shop.vercel.app"
        assert [c.args[0] for c in sleep.await_args_list] == [4.0, 4.0, 2.0]
        assert any("still running" in line for line in result.logs)


# ---------------------------------------------------------------------------
# Aborted runs
# ---------------------------------------------------------------------------


class TestAbortedRuns:
    @pytest.mark.asyncio
    async def test_missing_github_client(self, vercel, sleep, request_body):
        result = await _pipeline(None, vercel, sleep).run(request_body)

        assert result.success is False
        assert result.status == DeploymentStatus.ERROR
        assert result.stage == DeploymentStage.CREATING_REPOSITORY
        assert result.error == "GitHub token is not configured"

    @pytest.mark.asyncio
    async def test_repository_creation_failure(self, github, vercel, sleep, request_body):
        github.create_repository.side_effect = IntegrationError("github", "Bad credentials", status_code=401)

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is False
        assert result.stage == DeploymentStage.CREATING_REPOSITORY
        assert "Bad credentials" in result.error
        assert result.repo_url is None
        assert result.logs[-1].startswith("Deployment failed:")
        github.upsert_file.assert_not_awaited()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_name_conflict_on_first_attempt_fails(self, github, vercel, sleep, request_body):
        github.create_repository.side_effect = IntegrationError(
            "github", "name already exists on this account", status_code=422
        )

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is False
        assert result.stage == DeploymentStage.CREATING_REPOSITORY
        assert "name already exists" in result.error
        github.get_repository.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_keeps_repo_url(self, github, vercel, sleep, request_body):
        github.upsert_file.side_effect = IntegrationError("github", "Forbidden", status_code=403)

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is False
        assert result.stage == DeploymentStage.COMMITTING_FILES
        assert result.repo_url == "https://github.com/octo/shop"
        assert "package.json" in result.error
        vercel.ensure_project.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_both_build_triggers_fail(self, github, vercel, sleep, request_body):
        vercel.create_deployment_from_git.side_effect = IntegrationError("vercel", "no git", status_code=400)
        vercel.create_deployment_from_files.side_effect = IntegrationError("vercel", "quota", status_code=402)

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is False
        assert result.stage == DeploymentStage.TRIGGERING_BUILD
        assert "quota" in result.error

    @pytest.mark.asyncio
    async def test_build_error_aborts(self, github, vercel, sleep, request_body):
        vercel.get_deployment.side_effect = [
            {"id": "dpl_1", "url": "shop.vercel.app", "readyState": "ERROR", "errorMessage": "npm install failed"},
        ]

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is False
        assert result.stage == DeploymentStage.WAITING_FOR_BUILD
        assert result.error == "Build failed: npm install failed"
        assert result.ready is False

    @pytest.mark.asyncio
    async def test_status_check_failure_aborts(self, github, vercel, sleep, request_body):
        vercel.get_deployment.side_effect = IntegrationError("vercel", "Forbidden", status_code=403)

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.success is False
        assert result.stage == DeploymentStage.WAITING_FOR_BUILD
        assert result.error.startswith("Failed to check build status")
        assert result.deployment_id == "dpl_1"
        vercel.get_deployment.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_canceled_build_aborts(self, github, vercel, sleep, request_body):
        vercel.create_deployment_from_git.return_value = {"id": "dpl_1", "url": "x.vercel.app", "readyState": "CANCELED"}

        result = await _pipeline(github, vercel, sleep).run(request_body)

        assert result.stage == DeploymentStage.WAITING_FOR_BUILD
        assert result.error == "Build failed: canceled"
        vercel.get_deployment.assert_not_awaited()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestCreatePipeline:
    @pytest.mark.asyncio
    async def test_clients_follow_configured_tokens(self):
        config = Settings(github_token="gh", vercel_token="", deploy_poll_interval=2.0, http_max_retries=4)
        pipeline = create_pipeline(config)
        try:
            assert pipeline.github is not None
            assert pipeline.vercel is None
            assert pipeline.poll_interval == 2.0
            assert pipeline.retry_attempts == 4
        finally:
            await pipeline.aclose()

    @pytest.mark.asyncio
    async def test_no_tokens(self):
        async with create_pipeline(Settings(github_token="", vercel_token="")) as pipeline:
            assert pipeline.github is None
            assert pipeline.vercel is None
