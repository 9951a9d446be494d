"""Flow repository: stores canvases as JSON node/edge documents."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flowgen.core.logging import get_logger
from flowgen.db.models import Flow
from flowgen.flow.graph import FlowGraph
from flowgen.models.schemas import FlowEdge, FlowNode

logger = get_logger(__name__)


def _dump_nodes(nodes: list[FlowNode]) -> list[dict]:
    return [n.model_dump(mode="json", by_alias=True) for n in nodes]


def _dump_edges(edges: list[FlowEdge]) -> list[dict]:
    return [e.model_dump(mode="json", by_alias=True) for e in edges]


class FlowRepository:
    """Repository for persisting flows."""

    async def list_recent(self, db: AsyncSession, limit: int = 100) -> list[Flow]:
        """List flows, most recently updated first."""
        result = await db.execute(
            select(Flow).order_by(Flow.updated_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, flow_id: str) -> Flow | None:
        result = await db.execute(select(Flow).where(Flow.id == flow_id))
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        name: str,
        nodes: list[FlowNode] | None = None,
        edges: list[FlowEdge] | None = None,
    ) -> Flow:
        """Create a new flow."""
        flow = Flow(
            id=str(uuid.uuid4()),
            name=name,
            nodes=_dump_nodes(nodes or []),
            edges=_dump_edges(edges or []),
        )
        db.add(flow)
        await db.commit()
        await db.refresh(flow)
        logger.info("flow_created", flow_id=flow.id, name=name)
        return flow

    async def update(
        self,
        db: AsyncSession,
        flow_id: str,
        name: str | None = None,
        nodes: list[FlowNode] | None = None,
        edges: list[FlowEdge] | None = None,
    ) -> Flow | None:
        """Partial update of a flow. Returns updated flow or None."""
        flow = await self.get(db, flow_id)
        if not flow:
            return None

        if name is not None:
            flow.name = name
        if nodes is not None:
            flow.nodes = _dump_nodes(nodes)
        if edges is not None:
            flow.edges = _dump_edges(edges)

        await db.commit()
        await db.refresh(flow)
        return flow

    async def save_graph(self, db: AsyncSession, flow: Flow, graph: FlowGraph) -> Flow:
        """Write an edited graph back to its flow row."""
        flow.nodes = _dump_nodes(graph.nodes)
        flow.edges = _dump_edges(graph.edges)
        await db.commit()
        await db.refresh(flow)
        return flow

    async def delete(self, db: AsyncSession, flow_id: str) -> bool:
        """Delete a flow. Returns True if deleted."""
        flow = await self.get(db, flow_id)
        if not flow:
            return False
        await db.delete(flow)
        await db.commit()
        logger.info("flow_deleted", flow_id=flow_id)
        return True

    @staticmethod
    def to_graph(flow: Flow) -> FlowGraph:
        """Load the stored nodes and edges into an editable graph."""
        return FlowGraph.model_validate({"nodes": flow.nodes or [], "edges": flow.edges or []})


flow_repository = FlowRepository()
