"""Flow graph operations mirroring the canvas store.

A ``FlowGraph`` holds the nodes and edges of one flow. Mutations keep the
graph consistent: deleting a node drops every edge touching it, and edges
may only connect existing nodes.
"""

import uuid

from pydantic import BaseModel, Field

from flowgen.core.errors import FlowGenError, InvalidRequestError, NotFoundError
from flowgen.core.logging import get_logger
from flowgen.generation.schema import SchemaGenerator, schema_generator
from flowgen.generation.templates import AUTH_PLACEHOLDER_CODE
from flowgen.generation.ui import UIGenerator, ui_generator
from flowgen.models.schemas import (
    EdgeCreateRequest,
    FlowEdge,
    FlowNode,
    FlowNodeData,
    NodeType,
    NodeUpdateRequest,
    Position,
)

logger = get_logger(__name__)


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def default_label(node_type: NodeType) -> str:
    return f"{node_type.value.capitalize()} Node"


class FlowGraph(BaseModel):
    """Nodes and edges of a single flow."""

    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> FlowNode:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise NotFoundError(f"Node '{node_id}' not found")

    def add_node(self, node_type: NodeType, position: Position | None = None) -> FlowNode:
        node = FlowNode(
            id=generate_id(),
            type="custom",
            position=position or Position(),
            data=FlowNodeData(
                id=generate_id(),
                type=node_type,
                label=default_label(node_type),
                description="",
            ),
        )
        self.nodes.append(node)
        return node

    def update_node(self, node_id: str, updates: NodeUpdateRequest | dict) -> FlowNode:
        """Merge ``updates`` into the node's data. Only set fields are applied."""
        node = self.get_node(node_id)
        if isinstance(updates, NodeUpdateRequest):
            changes = updates.model_dump(exclude_unset=True)
        else:
            changes = dict(updates)
        merged = node.data.model_dump() | changes
        node.data = FlowNodeData.model_validate(merged)
        return node

    def delete_node(self, node_id: str) -> None:
        self.get_node(node_id)
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]

    def add_edge(self, request: EdgeCreateRequest) -> FlowEdge:
        node_ids = {n.id for n in self.nodes}
        missing = [end for end in (request.source, request.target) if end not in node_ids]
        if missing:
            raise InvalidRequestError(f"Edge endpoints not found: {', '.join(missing)}")
        edge = FlowEdge(id=generate_id(), **request.model_dump())
        self.edges.append(edge)
        return edge

    def delete_edge(self, edge_id: str) -> None:
        if not any(e.id == edge_id for e in self.edges):
            raise NotFoundError(f"Edge '{edge_id}' not found")
        self.edges = [e for e in self.edges if e.id != edge_id]


async def generate_node(
    node: FlowNode,
    ui: UIGenerator | None = None,
    schemas: SchemaGenerator | None = None,
) -> FlowNode:
    """Run the generator matching the node's type and store the result.

    Failures are recorded on the node (``error``) rather than raised, the
    way the inspector reports them.
    """
    ui = ui or ui_generator
    schemas = schemas or schema_generator
    data = node.data
    prompt = data.description or data.prompt or ""

    try:
        if data.type == NodeType.PAGE:
            result = await ui.generate(prompt)
            node.data = data.model_copy(
                update={"generated_code": result.code, "prompt": prompt, "is_generating": False, "error": None}
            )
        elif data.type == NodeType.DATA:
            result = await schemas.generate(prompt)
            node.data = data.model_copy(
                update={"db_schema": result.db_schema, "prompt": prompt, "is_generating": False, "error": None}
            )
        else:
            node.data = data.model_copy(
                update={
                    "generated_code": AUTH_PLACEHOLDER_CODE,
                    "prompt": prompt,
                    "is_generating": False,
                    "error": None,
                }
            )
    except FlowGenError as e:
        logger.warning("node_generation_failed", node_id=node.id, node_type=data.type.value, error=str(e))
        node.data = data.model_copy(update={"is_generating": False, "error": str(e)})
        return node

    logger.info("node_generated", node_id=node.id, node_type=data.type.value)
    return node
