"""Chat-driven refinement of a node's prompt, followed by regeneration."""

import re

from flowgen.ai.llm import LLMService, llm_service
from flowgen.ai.prompts import refine_system_prompt, refine_user_prompt
from flowgen.core.errors import FlowGenError, InvalidRequestError, LLMUnavailableError
from flowgen.core.logging import get_logger
from flowgen.generation.schema import SchemaGenerator, schema_generator
from flowgen.generation.ui import UIGenerator, ui_generator
from flowgen.models.schemas import NodeType, RefinePromptRequest, RefinePromptResponse

logger = get_logger(__name__)

ASSISTANT_REPLY = "I've updated your component based on your request."

_UPDATED_PROMPT_RE = re.compile(r"Updated prompt:?\s*[\"']?([^\"'\n]+)[\"']?", re.IGNORECASE)

_COLORS = ("green", "blue", "red")


def refine_prompt_fallback(original_prompt: str, refinement_request: str) -> str:
    """Keyword-based refinement used when no LLM is available."""
    updated = original_prompt
    refinement = refinement_request.lower()

    for color in _COLORS:
        if color in refinement:
            updated += f" with {color} color scheme"
            break

    if "two column" in refinement or "2 column" in refinement:
        updated += " in a two-column layout"
    elif "mobile" in refinement:
        updated += " optimized for mobile devices"

    if "loading" in refinement:
        updated += " with loading states"
    elif "animation" in refinement:
        updated += " with smooth animations"

    if "add field" in refinement or "add column" in refinement:
        updated += " with additional fields as requested"

    if updated == original_prompt:
        updated += f" ({refinement_request})"

    return updated


def extract_updated_prompt(response: str) -> str:
    """Pull the ``Updated prompt:`` line out of a model reply, else use it whole."""
    match = _UPDATED_PROMPT_RE.search(response)
    if match:
        return match.group(1).strip()
    return response.strip()


class PromptRefiner:
    """Refine a node prompt and regenerate the node's artifact."""

    def __init__(
        self,
        llm: LLMService | None = None,
        ui: UIGenerator | None = None,
        schemas: SchemaGenerator | None = None,
    ) -> None:
        self.llm = llm or llm_service
        self.ui = ui or ui_generator
        self.schemas = schemas or schema_generator

    async def refine(self, request: RefinePromptRequest) -> RefinePromptResponse:
        if not request.original_prompt.strip() or not request.refinement_request.strip():
            raise InvalidRequestError("Original prompt and refinement request are required")

        try:
            response = await self.llm.complete(
                refine_system_prompt(request.node_type),
                refine_user_prompt(request.original_prompt, request.refinement_request),
                temperature=0.7,
            )
        except LLMUnavailableError as e:
            logger.info("refine_prompt_fallback", reason=str(e))
            response = refine_prompt_fallback(request.original_prompt, request.refinement_request)

        updated_prompt = extract_updated_prompt(response) or request.original_prompt

        updated_code = None
        updated_schema = None
        try:
            if request.node_type == NodeType.PAGE:
                updated_code = (await self.ui.generate(updated_prompt)).code
            elif request.node_type == NodeType.DATA:
                updated_schema = (await self.schemas.generate(updated_prompt)).db_schema
        except FlowGenError as e:
            logger.warning(
                "refine_regeneration_failed",
                node_id=request.node_id,
                node_type=request.node_type.value,
                error=str(e),
            )

        logger.info(
            "prompt_refined",
            node_id=request.node_id,
            node_type=request.node_type.value,
            regenerated=updated_code is not None or updated_schema is not None,
        )
        return RefinePromptResponse(
            updated_prompt=updated_prompt,
            updated_code=updated_code,
            updated_schema=updated_schema,
            response=ASSISTANT_REPLY,
        )


prompt_refiner = PromptRefiner()
