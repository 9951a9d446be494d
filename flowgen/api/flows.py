"""Router for flow management: the canvas graph, node generation and deploys."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from flowgen.api.deploy import execute_deployment, get_deployment_pipeline
from flowgen.core.errors import InvalidRequestError, NotFoundError
from flowgen.core.logging import get_logger
from flowgen.db.base import get_db
from flowgen.db.models import Flow
from flowgen.deploy.pipeline import DeploymentPipeline
from flowgen.flow.graph import generate_node
from flowgen.models.schemas import (
    DeploymentRecordResponse,
    DeploymentRequest,
    EdgeCreateRequest,
    FlowCreateRequest,
    FlowDeployRequest,
    FlowEdge,
    FlowNode,
    FlowResponse,
    FlowUpdateRequest,
    NodeCreateRequest,
    NodeUpdateRequest,
)
from flowgen.repository import flow_repository

logger = get_logger(__name__)

router = APIRouter(prefix="/flows")


async def _get_flow_or_404(db: AsyncSession, flow_id: str) -> Flow:
    flow = await flow_repository.get(db, flow_id)
    if not flow:
        raise HTTPException(status_code=404, detail="Flow not found")
    return flow


@router.get("/", response_model=list[FlowResponse])
async def list_flows(db: AsyncSession = Depends(get_db)):
    """List saved flows."""
    try:
        flows = await flow_repository.list_recent(db)
        return [FlowResponse(**f.to_dict()) for f in flows]
    except Exception as e:
        logger.error("list_flows_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list flows")


@router.post("/", response_model=FlowResponse)
async def create_flow(request: FlowCreateRequest, db: AsyncSession = Depends(get_db)):
    """Create a flow, optionally seeded with nodes and edges."""
    try:
        flow = await flow_repository.create(db, name=request.name, nodes=request.nodes, edges=request.edges)
        return FlowResponse(**flow.to_dict())
    except Exception as e:
        await db.rollback()
        logger.error("create_flow_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create flow")


@router.get("/{flow_id}", response_model=FlowResponse)
async def get_flow(flow_id: str, db: AsyncSession = Depends(get_db)):
    flow = await _get_flow_or_404(db, flow_id)
    return FlowResponse(**flow.to_dict())


@router.put("/{flow_id}", response_model=FlowResponse)
async def update_flow(flow_id: str, request: FlowUpdateRequest, db: AsyncSession = Depends(get_db)):
    """Rename a flow or replace its nodes/edges wholesale."""
    try:
        flow = await flow_repository.update(
            db, flow_id, name=request.name, nodes=request.nodes, edges=request.edges
        )
        if not flow:
            raise HTTPException(status_code=404, detail="Flow not found")
        return FlowResponse(**flow.to_dict())
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        logger.error("update_flow_error", error=str(e), flow_id=flow_id)
        raise HTTPException(status_code=500, detail="Failed to update flow")


@router.delete("/{flow_id}")
async def delete_flow(flow_id: str, db: AsyncSession = Depends(get_db)):
    deleted = await flow_repository.delete(db, flow_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Flow not found")
    return {"deleted": True}


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------


@router.post("/{flow_id}/nodes", response_model=FlowNode)
async def add_node(flow_id: str, request: NodeCreateRequest, db: AsyncSession = Depends(get_db)):
    """Add a page, auth or data node at the given canvas position."""
    flow = await _get_flow_or_404(db, flow_id)
    graph = flow_repository.to_graph(flow)
    node = graph.add_node(request.type, request.position)
    await flow_repository.save_graph(db, flow, graph)
    logger.info("node_added", flow_id=flow_id, node_id=node.id, node_type=request.type.value)
    return node


@router.patch("/{flow_id}/nodes/{node_id}", response_model=FlowNode)
async def update_node(
    flow_id: str,
    node_id: str,
    request: NodeUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Merge fields into a node's data."""
    flow = await _get_flow_or_404(db, flow_id)
    graph = flow_repository.to_graph(flow)
    try:
        node = graph.update_node(node_id, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await flow_repository.save_graph(db, flow, graph)
    return node


@router.delete("/{flow_id}/nodes/{node_id}", response_model=FlowResponse)
async def delete_node(flow_id: str, node_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a node and every edge attached to it."""
    flow = await _get_flow_or_404(db, flow_id)
    graph = flow_repository.to_graph(flow)
    try:
        graph.delete_node(node_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    flow = await flow_repository.save_graph(db, flow, graph)
    return FlowResponse(**flow.to_dict())


@router.post("/{flow_id}/nodes/{node_id}/generate", response_model=FlowNode)
async def generate_flow_node(flow_id: str, node_id: str, db: AsyncSession = Depends(get_db)):
    """Generate the node's artifact from its description.

    Generation problems are reported on the node's ``error`` field.
    """
    flow = await _get_flow_or_404(db, flow_id)
    graph = flow_repository.to_graph(flow)
    try:
        node = graph.get_node(node_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    node = await generate_node(node)
    await flow_repository.save_graph(db, flow, graph)
    return node


# -----------------------------------------------------------------------------
# Edges
# -----------------------------------------------------------------------------


@router.post("/{flow_id}/edges", response_model=FlowEdge)
async def add_edge(flow_id: str, request: EdgeCreateRequest, db: AsyncSession = Depends(get_db)):
    flow = await _get_flow_or_404(db, flow_id)
    graph = flow_repository.to_graph(flow)
    try:
        edge = graph.add_edge(request)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await flow_repository.save_graph(db, flow, graph)
    return edge


@router.delete("/{flow_id}/edges/{edge_id}", response_model=FlowResponse)
async def delete_edge(flow_id: str, edge_id: str, db: AsyncSession = Depends(get_db)):
    flow = await _get_flow_or_404(db, flow_id)
    graph = flow_repository.to_graph(flow)
    try:
        graph.delete_edge(edge_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    flow = await flow_repository.save_graph(db, flow, graph)
    return FlowResponse(**flow.to_dict())


# -----------------------------------------------------------------------------
# Deploy
# -----------------------------------------------------------------------------


@router.post("/{flow_id}/deploy", response_model=DeploymentRecordResponse)
async def deploy_flow(
    flow_id: str,
    request: FlowDeployRequest,
    pipeline: DeploymentPipeline = Depends(get_deployment_pipeline),
    db: AsyncSession = Depends(get_db),
):
    """Deploy the flow's stored nodes. The flow name is used when no project name is given."""
    flow = await _get_flow_or_404(db, flow_id)
    graph = flow_repository.to_graph(flow)
    deploy_request = DeploymentRequest(
        nodes=graph.nodes,
        project_name=request.project_name or flow.name,
    )
    return await execute_deployment(deploy_request, pipeline, db, flow_id=flow_id)
