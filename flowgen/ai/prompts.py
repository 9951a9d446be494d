"""System prompts for the generation endpoints."""

from flowgen.models.schemas import NodeType

UI_SYSTEM_PROMPT = """You generate UI for a visual app builder called FlowGen.

Given a description, return ONE self-contained HTML fragment styled with Tailwind CSS utility classes.

Rules:
- Return only the markup, no explanations and no <html>, <head> or <body> tags
- Use a single root <div>
- Do not include <script> tags or inline event handlers
- Use realistic placeholder content that matches the description"""

SCHEMA_SYSTEM_PROMPT = """You are a database schema expert. Given a description of data requirements, generate a PostgreSQL database schema.

Return ONLY a valid JSON object with the following structure:
{
  "tableName": "table_name",
  "fields": [
    {
      "name": "field_name",
      "type": "PostgreSQL_type",
      "nullable": boolean,
      "primary": boolean,
      "references": "table.field or null"
    }
  ],
  "sql": "CREATE TABLE statement"
}

Rules:
- Use snake_case for table and field names
- Include appropriate PostgreSQL data types (TEXT, INTEGER, BOOLEAN, TIMESTAMP, UUID, etc.)
- Always include an 'id' field as UUID primary key
- Include created_at and updated_at timestamp fields
- Make the SQL compatible with Supabase/PostgreSQL
- Ensure the JSON is valid and parseable"""

_REFINE_BASE = (
    "You are an AI assistant helping users refine their component descriptions "
    "for a visual app builder called FlowGen."
)

_REFINE_FOCUS = {
    NodeType.PAGE: (
        "You are helping with UI page components. Fold requests such as "
        '"make the button green" or "add a loading state" into the prompt: '
        "visual styling, UI components, interactions and content structure."
    ),
    NodeType.DATA: (
        "You are helping with database schema definitions. Fold requests such as "
        '"add a timestamp field" or "make email unique" into the prompt: '
        "tables, relationships, field types, constraints and keys."
    ),
    NodeType.AUTH: (
        "You are helping with authentication flow definitions. Fold requests such as "
        '"add social login" or "require email verification" into the prompt: '
        "auth methods, registration flow, security and session management."
    ),
}

_REFINE_FORMAT = (
    'Answer with a line of the form "Updated prompt: <prompt>" followed by a '
    "brief explanation of what you changed."
)


def refine_system_prompt(node_type: NodeType | str | None) -> str:
    """System prompt for refining a node's description."""
    try:
        focus = _REFINE_FOCUS[NodeType(node_type)]
    except ValueError:
        return f"{_REFINE_BASE}\n\n{_REFINE_FORMAT}"
    return f"{_REFINE_BASE}\n\n{focus}\n\n{_REFINE_FORMAT}"


def refine_user_prompt(original_prompt: str, refinement_request: str) -> str:
    return (
        f'Original prompt: "{original_prompt}"\n\n'
        f'User refinement request: "{refinement_request}"\n\n'
        "Please provide:\n"
        "1. An updated prompt that incorporates the user's refinement request\n"
        "2. A brief explanation of what you changed"
    )
