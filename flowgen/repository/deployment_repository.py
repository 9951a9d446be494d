"""Deployment repository: one row per pipeline run."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flowgen.core.logging import get_logger
from flowgen.db.models import Deployment
from flowgen.models.schemas import DeploymentResult

logger = get_logger(__name__)


class DeploymentRepository:
    """Repository for recording deployment runs."""

    async def record(
        self,
        db: AsyncSession,
        project_name: str,
        result: DeploymentResult,
        flow_id: str | None = None,
    ) -> Deployment:
        """Store the outcome of a finished run."""
        deployment = Deployment(
            id=str(uuid.uuid4()),
            flow_id=flow_id,
            project_name=project_name,
            repo_name=result.repo_name,
            repo_url=result.repo_url,
            url=result.url,
            deployment_id=result.deployment_id,
            status=result.status.value,
            stage=result.stage.value,
            ready=result.ready,
            error=result.error,
            logs=list(result.logs),
        )
        db.add(deployment)
        await db.commit()
        await db.refresh(deployment)
        logger.info(
            "deployment_recorded",
            record_id=deployment.id,
            status=deployment.status,
            stage=deployment.stage,
        )
        return deployment

    async def get(self, db: AsyncSession, record_id: str) -> Deployment | None:
        result = await db.execute(select(Deployment).where(Deployment.id == record_id))
        return result.scalar_one_or_none()

    async def list_recent(
        self,
        db: AsyncSession,
        flow_id: str | None = None,
        limit: int = 50,
    ) -> list[Deployment]:
        """List recent runs, newest first, optionally for one flow."""
        query = select(Deployment)
        if flow_id:
            query = query.where(Deployment.flow_id == flow_id)
        result = await db.execute(query.order_by(Deployment.created_at.desc()).limit(limit))
        return list(result.scalars().all())


deployment_repository = DeploymentRepository()
