"""Wire models for the FlowGen API.

JSON payloads use the canvas client's camelCase keys; Python code uses
snake_case attributes. Both spellings are accepted on input.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising to camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeType(str, Enum):
    PAGE = "page"
    AUTH = "auth"
    DATA = "data"


class DeploymentStatus(str, Enum):
    IDLE = "idle"
    DEPLOYING = "deploying"
    SUCCESS = "success"
    ERROR = "error"


class DeploymentStage(str, Enum):
    """Pipeline stages, in execution order."""

    VALIDATING = "validating"
    CREATING_REPOSITORY = "creating_repository"
    GENERATING_FILES = "generating_files"
    COMMITTING_FILES = "committing_files"
    LINKING_PROJECT = "linking_project"
    TRIGGERING_BUILD = "triggering_build"
    WAITING_FOR_BUILD = "waiting_for_build"
    COMPLETED = "completed"
    FAILED = "failed"


GenerationSource = Literal["llm", "fallback"]


# Schema Schemas
class DatabaseField(CamelModel):
    """A single column in a generated table."""

    name: str
    type: str
    nullable: bool = False
    primary: bool = False
    references: str | None = None


class DatabaseSchema(CamelModel):
    """A generated table definition."""

    table_name: str
    fields: list[DatabaseField]
    sql: str | None = None


# Flow Schemas
class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class FlowNodeData(CamelModel):
    """Inspector-editable state of a canvas node."""

    id: str
    type: NodeType
    label: str
    description: str = ""
    prompt: str | None = None
    generated_code: str | None = None
    db_schema: DatabaseSchema | None = Field(default=None, alias="schema")
    is_generating: bool = False
    error: str | None = None


class FlowNode(CamelModel):
    """A node on the canvas."""

    id: str
    type: str = "custom"
    position: Position = Field(default_factory=Position)
    data: FlowNodeData


class FlowEdge(CamelModel):
    """A connection between two nodes."""

    id: str
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None


class NodeCreateRequest(CamelModel):
    type: NodeType
    position: Position = Field(default_factory=Position)


class NodeUpdateRequest(CamelModel):
    """Partial update of a node's data. Unset fields are left untouched."""

    label: str | None = None
    description: str | None = None
    prompt: str | None = None
    generated_code: str | None = None
    db_schema: DatabaseSchema | None = Field(default=None, alias="schema")
    error: str | None = None


class EdgeCreateRequest(CamelModel):
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None


class FlowCreateRequest(CamelModel):
    name: str = "Untitled flow"
    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)


class FlowUpdateRequest(CamelModel):
    name: str | None = None
    nodes: list[FlowNode] | None = None
    edges: list[FlowEdge] | None = None


class FlowResponse(CamelModel):
    id: str
    name: str
    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Generation Schemas
class GenerateUIRequest(CamelModel):
    prompt: str = ""
    type: Literal["component", "page"] = "component"


class GenerateUIResponse(CamelModel):
    code: str
    preview: str
    source: GenerationSource = "fallback"


class CreateSchemaRequest(CamelModel):
    description: str = ""


class CreateSchemaResponse(CamelModel):
    db_schema: DatabaseSchema = Field(alias="schema")
    source: GenerationSource = "fallback"


class RefinePromptRequest(CamelModel):
    node_id: str | None = None
    original_prompt: str = ""
    refinement_request: str = ""
    node_type: NodeType = NodeType.PAGE


class RefinePromptResponse(CamelModel):
    updated_prompt: str
    updated_code: str | None = None
    updated_schema: DatabaseSchema | None = None
    response: str


# Deployment Schemas
class ProjectFile(BaseModel):
    """A file in the assembled project, path relative to the repository root."""

    path: str
    content: str


class DeploymentRequest(CamelModel):
    nodes: list[FlowNode] = Field(default_factory=list)
    project_name: str = ""


class FlowDeployRequest(CamelModel):
    project_name: str = ""


class DeploymentResult(CamelModel):
    success: bool
    url: str | None = None
    repo_url: str | None = None
    repo_name: str | None = None
    error: str | None = None
    logs: list[str] = Field(default_factory=list)
    deployment_id: str | None = None
    status: DeploymentStatus = DeploymentStatus.IDLE
    stage: DeploymentStage = DeploymentStage.VALIDATING
    ready: bool = False


class DeploymentRecordResponse(DeploymentResult):
    """A persisted deployment run."""

    id: str
    project_name: str
    flow_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    integrations: dict[str, Any]
