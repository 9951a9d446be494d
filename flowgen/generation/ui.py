"""UI markup generation for page nodes."""

import html

from flowgen.ai.llm import LLMService, llm_service, strip_code_fences
from flowgen.ai.prompts import UI_SYSTEM_PROMPT
from flowgen.core.errors import InvalidRequestError, LLMUnavailableError
from flowgen.core.logging import get_logger
from flowgen.generation.templates import GENERIC, KEYWORD_TEMPLATES
from flowgen.models.schemas import GenerateUIResponse

logger = get_logger(__name__)


def generate_fallback_markup(prompt: str) -> str:
    """Pick a canned layout by keyword and drop the prompt into it."""
    lowered = prompt.lower()
    template = GENERIC
    for keywords, candidate in KEYWORD_TEMPLATES:
        if any(keyword in lowered for keyword in keywords):
            template = candidate
            break
    return template.replace("{prompt}", html.escape(prompt))


class UIGenerator:
    """Generate Tailwind markup for a page node from its description."""

    def __init__(self, llm: LLMService | None = None) -> None:
        self.llm = llm or llm_service

    async def generate(self, prompt: str, kind: str = "component") -> GenerateUIResponse:
        if not prompt or not prompt.strip():
            raise InvalidRequestError("Prompt is required")

        try:
            text = await self.llm.complete(
                UI_SYSTEM_PROMPT,
                f"Generate a {kind} for: {prompt}",
                temperature=0.7,
            )
            code = strip_code_fences(text)
            if code:
                logger.info("ui_generated", source="llm", length=len(code))
                return GenerateUIResponse(code=code, preview=code, source="llm")
            logger.warning("ui_llm_empty_response")
        except LLMUnavailableError as e:
            logger.info("ui_generation_fallback", reason=str(e))

        code = generate_fallback_markup(prompt)
        return GenerateUIResponse(code=code, preview=code, source="fallback")


ui_generator = UIGenerator()
