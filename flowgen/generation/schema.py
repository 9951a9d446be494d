"""Database schema generation for data nodes.

The LLM is asked for a JSON table definition; without one a schema is
derived from keywords in the description. Either way the payload goes
through the same parsing and validation path.
"""

import json
import re
from typing import Any

from flowgen.ai.llm import LLMService, llm_service, strip_code_fences
from flowgen.ai.prompts import SCHEMA_SYSTEM_PROMPT
from flowgen.core.errors import GenerationError, InvalidRequestError, LLMUnavailableError
from flowgen.core.logging import get_logger
from flowgen.models.schemas import CreateSchemaResponse, DatabaseField, DatabaseSchema

logger = get_logger(__name__)

_ID = {"name": "id", "type": "UUID", "nullable": False, "primary": True}
_TIMESTAMPS = [
    {"name": "created_at", "type": "TIMESTAMP", "nullable": False},
    {"name": "updated_at", "type": "TIMESTAMP", "nullable": False},
]

# Ordered: the first rule whose keyword appears in the description wins.
_KEYWORD_TABLES: list[tuple[tuple[str, ...], str, list[dict[str, Any]]]] = [
    (
        ("user", "account"),
        "users",
        [
            {"name": "email", "type": "TEXT", "nullable": False},
            {"name": "name", "type": "TEXT", "nullable": True},
        ],
    ),
    (
        ("post", "article", "blog"),
        "posts",
        [
            {"name": "title", "type": "TEXT", "nullable": False},
            {"name": "content", "type": "TEXT", "nullable": True},
            {"name": "author_id", "type": "UUID", "nullable": True},
            {"name": "published", "type": "BOOLEAN", "nullable": False},
        ],
    ),
    (
        ("product", "item"),
        "products",
        [
            {"name": "name", "type": "TEXT", "nullable": False},
            {"name": "description", "type": "TEXT", "nullable": True},
            {"name": "price", "type": "DECIMAL", "nullable": True},
            {"name": "category", "type": "TEXT", "nullable": True},
        ],
    ),
]

_GENERIC_COLUMNS = [
    {"name": "name", "type": "TEXT", "nullable": False},
    {"name": "description", "type": "TEXT", "nullable": True},
    {"name": "status", "type": "TEXT", "nullable": True},
]


def render_create_table(table_name: str, fields: list[DatabaseField]) -> str:
    """Render a ``CREATE TABLE`` statement for a field list."""
    lines = []
    for field in fields:
        line = f"  {field.name} {field.type}"
        if field.primary:
            line += " PRIMARY KEY"
        if not field.nullable:
            line += " NOT NULL"
        if "_at" in field.name:
            line += " DEFAULT NOW()"
        lines.append(line)
    body = ",\n".join(lines)
    return f"CREATE TABLE {table_name} (\n{body}\n);"


def generate_fallback_schema(description: str) -> str:
    """Derive a table from keywords in ``description``; returns JSON text."""
    lowered = description.lower()
    for keywords, table_name, columns in _KEYWORD_TABLES:
        if any(keyword in lowered for keyword in keywords):
            break
    else:
        words = description.split()
        first = words[0] if words else ""
        table_name = re.sub(r"[^a-z0-9]", "", first.lower()) or "items"
        columns = _GENERIC_COLUMNS

    raw_fields = [_ID, *columns, *_TIMESTAMPS]
    fields = [DatabaseField(**f) for f in raw_fields]
    return json.dumps(
        {
            "tableName": table_name,
            "fields": raw_fields,
            "sql": render_create_table(table_name, fields),
        }
    )


def parse_schema_payload(text: str) -> DatabaseSchema:
    """Validate a model (or fallback) JSON payload into a ``DatabaseSchema``.

    Raises:
        GenerationError: If the payload is not JSON or lacks a table name or
            field list.
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error("schema_parse_failed", response=text[:500])
        raise GenerationError("Invalid schema format returned by AI") from e

    if not isinstance(data, dict):
        raise GenerationError("Invalid schema structure")
    table_name = data.get("tableName") or data.get("table_name")
    raw_fields = data.get("fields")
    if not table_name or not isinstance(raw_fields, list):
        raise GenerationError("Invalid schema structure")

    fields: list[DatabaseField] = []
    for raw in raw_fields:
        if not isinstance(raw, dict) or not raw.get("name") or not raw.get("type"):
            raise GenerationError("Invalid schema structure")
        fields.append(
            DatabaseField(
                name=str(raw["name"]),
                type=str(raw["type"]),
                nullable=bool(raw.get("nullable") or False),
                primary=bool(raw.get("primary") or False),
                references=raw.get("references") or None,
            )
        )

    sql = data.get("sql") or render_create_table(str(table_name), fields)
    return DatabaseSchema(table_name=str(table_name), fields=fields, sql=sql)


class SchemaGenerator:
    """Generate a table definition for a data node from its description."""

    def __init__(self, llm: LLMService | None = None) -> None:
        self.llm = llm or llm_service

    async def generate(self, description: str) -> CreateSchemaResponse:
        if not description or not description.strip():
            raise InvalidRequestError("Description is required")

        try:
            text = await self.llm.complete(SCHEMA_SYSTEM_PROMPT, description, temperature=0.3)
            source = "llm"
        except LLMUnavailableError as e:
            logger.info("schema_generation_fallback", reason=str(e))
            text = generate_fallback_schema(description)
            source = "fallback"

        if not text or not text.strip():
            raise GenerationError("No response from model")

        schema = parse_schema_payload(text)
        # SQL is emitted into the deployed project, never executed here.
        logger.info(
            "schema_generated",
            source=source,
            table=schema.table_name,
            field_count=len(schema.fields),
        )
        return CreateSchemaResponse(db_schema=schema, source=source)


schema_generator = SchemaGenerator()
