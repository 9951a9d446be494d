"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment is fixed before any
# flowgen module is imported.
_db_dir = tempfile.mkdtemp(prefix="flowgen-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_db_dir) / 'test.db'}"
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LLM_PROVIDER"] = "openai"
for _key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GITHUB_TOKEN", "VERCEL_TOKEN", "VERCEL_TEAM_ID"):
    os.environ[_key] = ""

import pytest  # noqa: E402

from flowgen.models.schemas import (  # noqa: E402
    DatabaseField,
    DatabaseSchema,
    FlowNode,
    FlowNodeData,
    NodeType,
)


def make_node(
    node_id: str,
    node_type: NodeType = NodeType.PAGE,
    label: str = "Page Node",
    code: str | None = None,
    schema: DatabaseSchema | None = None,
) -> FlowNode:
    """Build a canvas node with the given artifact."""
    return FlowNode(
        id=node_id,
        data=FlowNodeData(
            id=f"data-{node_id}",
            type=node_type,
            label=label,
            generated_code=code,
            db_schema=schema,
        ),
    )


@pytest.fixture
def page_node() -> FlowNode:
    return make_node("n1", NodeType.PAGE, "Home", code='<div class="p-4">Hello</div>')


@pytest.fixture
def users_schema() -> DatabaseSchema:
    return DatabaseSchema(
        table_name="users",
        fields=[
            DatabaseField(name="id", type="UUID", primary=True),
            DatabaseField(name="email", type="TEXT"),
            DatabaseField(name="created_at", type="TIMESTAMP"),
        ],
    )
