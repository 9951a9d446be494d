"""Database ORM models for flows and deployment runs."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, JSON, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from flowgen.db.base import Base


class Flow(Base):
    """A saved canvas: nodes and edges stored as JSON documents."""

    __tablename__ = "flows"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    nodes: Mapped[list] = mapped_column(JSON, default=list)
    edges: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "nodes": self.nodes or [],
            "edges": self.edges or [],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class Deployment(Base):
    """One run of the deployment pipeline."""

    __tablename__ = "deployments"
    __table_args__ = (
        Index("ix_deployments_flow_created", "flow_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # No foreign key: deployments outlive the flow they were started from.
    flow_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    repo_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    repo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    deployment_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="deploying", index=True)
    stage: Mapped[str] = mapped_column(String(40), default="validating")
    ready: Mapped[bool] = mapped_column(Boolean, default=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    logs: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "flow_id": self.flow_id,
            "project_name": self.project_name,
            "repo_name": self.repo_name,
            "repo_url": self.repo_url,
            "url": self.url,
            "deployment_id": self.deployment_id,
            "status": self.status,
            "stage": self.stage,
            "ready": self.ready,
            "success": self.status == "success",
            "error": self.error,
            "logs": self.logs or [],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
