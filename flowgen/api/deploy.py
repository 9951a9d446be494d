"""Router for deployments."""

from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from flowgen.core.errors import InvalidRequestError
from flowgen.core.logging import get_logger
from flowgen.db.base import get_db
from flowgen.deploy.pipeline import DeploymentPipeline, create_pipeline
from flowgen.models.schemas import (
    DeploymentRecordResponse,
    DeploymentRequest,
    DeploymentResult,
    DeploymentStage,
    DeploymentStatus,
)
from flowgen.repository import deployment_repository

logger = get_logger(__name__)

router = APIRouter()


async def get_deployment_pipeline() -> AsyncGenerator[DeploymentPipeline, None]:
    """Dependency yielding a pipeline whose HTTP clients are closed afterwards."""
    async with create_pipeline() as pipeline:
        yield pipeline


async def execute_deployment(
    request: DeploymentRequest,
    pipeline: DeploymentPipeline,
    db: AsyncSession,
    flow_id: str | None = None,
) -> JSONResponse:
    """Run the pipeline, record the run and map the outcome to a status code."""
    status_code = 200
    try:
        result = await pipeline.run(request)
        if not result.success:
            status_code = 500
    except InvalidRequestError as e:
        status_code = 400
        result = DeploymentResult(
            success=False,
            status=DeploymentStatus.ERROR,
            stage=DeploymentStage.VALIDATING,
            error=str(e),
            logs=[f"Validation failed: {e}"],
        )
    except Exception as e:
        logger.error("deploy_error", error=str(e), project=request.project_name, flow_id=flow_id)
        status_code = 500
        result = DeploymentResult(
            success=False,
            status=DeploymentStatus.ERROR,
            stage=DeploymentStage.FAILED,
            error="Deployment failed unexpectedly",
            logs=[f"Deployment failed: {e}"],
        )

    body: DeploymentResult = result
    try:
        record = await deployment_repository.record(
            db, project_name=request.project_name, result=result, flow_id=flow_id
        )
        body = DeploymentRecordResponse(**record.to_dict())
    except Exception as e:
        # The outcome is still returned to the caller when the audit row cannot be written.
        await db.rollback()
        logger.error("deployment_record_error", error=str(e), project=request.project_name)

    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


@router.post("/deploy", response_model=DeploymentRecordResponse)
async def deploy(
    request: DeploymentRequest,
    pipeline: DeploymentPipeline = Depends(get_deployment_pipeline),
    db: AsyncSession = Depends(get_db),
):
    """Deploy the given nodes as a new GitHub repository and hosted site."""
    return await execute_deployment(request, pipeline, db)


@router.get("/deployments", response_model=list[DeploymentRecordResponse])
async def list_deployments(
    flow_id: str | None = Query(default=None, alias="flowId"),
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    """List recent deployment runs."""
    try:
        records = await deployment_repository.list_recent(db, flow_id=flow_id, limit=limit)
        return [DeploymentRecordResponse(**r.to_dict()) for r in records]
    except Exception as e:
        logger.error("list_deployments_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list deployments")


@router.get("/deployments/{record_id}", response_model=DeploymentRecordResponse)
async def get_deployment(record_id: str, db: AsyncSession = Depends(get_db)):
    """Get one recorded deployment run."""
    try:
        record = await deployment_repository.get(db, record_id)
        if not record:
            raise HTTPException(status_code=404, detail="Deployment not found")
        return DeploymentRecordResponse(**record.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        logger.error("get_deployment_error", error=str(e), record_id=record_id)
        raise HTTPException(status_code=500, detail="Failed to get deployment")
