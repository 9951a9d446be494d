"""Tests for flow graph editing and node generation."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from flowgen.core.errors import GenerationError, InvalidRequestError, NotFoundError
from flowgen.flow.graph import FlowGraph, default_label, generate_node
from flowgen.generation.templates import AUTH_PLACEHOLDER_CODE
from flowgen.models.schemas import (
    CreateSchemaResponse,
    DatabaseSchema,
    EdgeCreateRequest,
    GenerateUIResponse,
    NodeType,
    NodeUpdateRequest,
    Position,
)


@pytest.fixture
def graph() -> FlowGraph:
    return FlowGraph()


class TestNodes:
    def test_add_node_defaults(self, graph):
        node = graph.add_node(NodeType.DATA, Position(x=10, y=20))

        assert node.type == "custom"
        assert node.position.x == 10
        assert node.data.type == NodeType.DATA
        assert node.data.label == "Data Node"
        assert node.data.description == ""
        assert node.data.is_generating is False
        assert graph.nodes == [node]

    def test_ids_are_unique(self, graph):
        a = graph.add_node(NodeType.PAGE)
        b = graph.add_node(NodeType.PAGE)
        assert a.id != b.id
        assert a.data.id != b.data.id

    def test_default_label(self):
        assert default_label(NodeType.AUTH) == "Auth Node"

    def test_update_applies_only_set_fields(self, graph):
        node = graph.add_node(NodeType.PAGE)
        graph.update_node(node.id, NodeUpdateRequest(description="A landing page"))
        graph.update_node(node.id, NodeUpdateRequest(label="Home"))

        updated = graph.get_node(node.id)
        assert updated.data.label == "Home"
        assert updated.data.description == "A landing page"
        assert updated.data.type == NodeType.PAGE

    def test_update_accepts_dict(self, graph):
        node = graph.add_node(NodeType.PAGE)
        graph.update_node(node.id, {"generated_code": "<div/>"})
        assert graph.get_node(node.id).data.generated_code == "<div/>"

    def test_update_missing_node(self, graph):
        with pytest.raises(NotFoundError):
            graph.update_node("nope", NodeUpdateRequest(label="x"))

    def test_delete_node_cascades_edges(self, graph):
        a = graph.add_node(NodeType.PAGE)
        b = graph.add_node(NodeType.DATA)
        c = graph.add_node(NodeType.AUTH)
        graph.add_edge(EdgeCreateRequest(source=a.id, target=b.id))
        keep = graph.add_edge(EdgeCreateRequest(source=c.id, target=a.id))
        graph.add_edge(EdgeCreateRequest(source=c.id, target=b.id))

        graph.delete_node(b.id)

        assert [n.id for n in graph.nodes] == [a.id, c.id]
        assert graph.edges == [keep]


class TestEdges:
    def test_edge_requires_existing_endpoints(self, graph):
        a = graph.add_node(NodeType.PAGE)
        with pytest.raises(InvalidRequestError, match="missing"):
            graph.add_edge(EdgeCreateRequest(source=a.id, target="missing"))

    def test_delete_edge(self, graph):
        a = graph.add_node(NodeType.PAGE)
        b = graph.add_node(NodeType.PAGE)
        edge = graph.add_edge(EdgeCreateRequest(source=a.id, target=b.id, source_handle="out"))
        assert edge.source_handle == "out"

        graph.delete_edge(edge.id)
        assert graph.edges == []
        with pytest.raises(NotFoundError):
            graph.delete_edge(edge.id)


class TestGenerateNode:
    @pytest.fixture
    def ui(self):
        generator = MagicMock()
        generator.generate = AsyncMock(
            return_value=GenerateUIResponse(code="<main/>", preview="<main/>", source="llm")
        )
        return generator

    @pytest.fixture
    def schemas(self, users_schema):
        generator = MagicMock()
        generator.generate = AsyncMock(
            return_value=CreateSchemaResponse(db_schema=users_schema, source="fallback")
        )
        return generator

    @pytest.mark.asyncio
    async def test_page_node_gets_code(self, graph, ui, schemas):
        node = graph.add_node(NodeType.PAGE)
        graph.update_node(node.id, NodeUpdateRequest(description="landing page"))

        result = await generate_node(graph.get_node(node.id), ui=ui, schemas=schemas)

        assert result.data.generated_code == "<main/>"
        assert result.data.prompt == "landing page"
        assert result.data.error is None
        ui.generate.assert_awaited_once_with("landing page")

    @pytest.mark.asyncio
    async def test_data_node_gets_schema(self, graph, ui, schemas):
        node = graph.add_node(NodeType.DATA)
        graph.update_node(node.id, NodeUpdateRequest(description="users"))

        result = await generate_node(graph.get_node(node.id), ui=ui, schemas=schemas)

        assert isinstance(result.data.db_schema, DatabaseSchema)
        assert result.data.db_schema.table_name == "users"
        assert result.data.generated_code is None

    @pytest.mark.asyncio
    async def test_auth_node_gets_placeholder(self, graph, ui, schemas):
        node = graph.add_node(NodeType.AUTH)
        result = await generate_node(node, ui=ui, schemas=schemas)

        assert result.data.generated_code == AUTH_PLACEHOLDER_CODE
        ui.generate.assert_not_awaited()
        schemas.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_recorded_on_node(self, graph, ui, schemas):
        schemas.generate.side_effect = GenerationError("Invalid schema structure")
        node = graph.add_node(NodeType.DATA)

        result = await generate_node(node, ui=ui, schemas=schemas)

        assert result.data.error == "Invalid schema structure"
        assert result.data.is_generating is False
        assert result.data.db_schema is None
