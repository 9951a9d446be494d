import re
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from flowgen.config import Settings, settings as default_settings
from flowgen.core.errors import LLMUnavailableError
from flowgen.core.logging import get_logger

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"^\s*```[\w-]*\s*\n(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)


def extract_text_from_content(content: Any) -> str:
    """Extract text content from an LLM message.

    Handles plain strings, lists of content blocks (text blocks are joined,
    tool_use blocks skipped) and single dict blocks.
    """
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        text_parts = []
        for item in content:
            if isinstance(item, dict):
                if item.get("type") == "tool_use":
                    continue
                if "text" in item:
                    text_parts.append(str(item["text"]))
            elif isinstance(item, str):
                text_parts.append(item)
            else:
                text_parts.append(str(item))
        return "".join(text_parts)

    if isinstance(content, dict):
        if "text" in content:
            return str(content["text"])
        if content.get("type") == "tool_use":
            return ""

    return str(content)


def strip_code_fences(text: str) -> str:
    """Remove a single markdown code fence wrapping the whole payload."""
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body").strip()
    return text.strip()


class LLMService:
    """Chat completion over the configured provider.

    Every failure mode (missing key, provider error, timeout) surfaces as
    ``LLMUnavailableError`` so generators can switch to their fallbacks.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or default_settings
        # Cache LLM clients by (provider, model, temperature) to avoid re-creating HTTP clients
        self._cache: dict[tuple[str, str, float], BaseChatModel] = {}

    @property
    def provider(self) -> str:
        return self.config.llm_provider

    @property
    def model(self) -> str:
        if self.provider == "anthropic":
            return self.config.anthropic_model
        return self.config.openai_model

    def is_configured(self) -> bool:
        """Whether an API key is present for the active provider."""
        if self.provider == "anthropic":
            return bool(self.config.anthropic_api_key)
        return bool(self.config.openai_api_key)

    def _get_openai(self, temperature: float) -> ChatOpenAI:
        """Get OpenAI client."""
        return ChatOpenAI(
            api_key=self.config.openai_api_key,
            model=self.config.openai_model,
            temperature=temperature,
            request_timeout=float(self.config.llm_request_timeout),
            max_retries=self.config.llm_max_retries,
        )

    def _get_anthropic(self, temperature: float) -> ChatAnthropic:
        """Get Anthropic client."""
        return ChatAnthropic(
            api_key=self.config.anthropic_api_key,
            model=self.config.anthropic_model,
            temperature=temperature,
            timeout=float(self.config.llm_request_timeout),
            max_retries=self.config.llm_max_retries,
        )

    def get_llm(self, temperature: float = 0.7) -> BaseChatModel:
        """Get a chat model for the active provider.

        Raises:
            LLMUnavailableError: If the provider has no API key configured.
        """
        if not self.is_configured():
            raise LLMUnavailableError(f"{self.provider} API key not configured")

        cache_key = (self.provider, self.model, temperature)
        if cache_key in self._cache:
            return self._cache[cache_key]

        if self.provider == "anthropic":
            client = self._get_anthropic(temperature)
        else:
            client = self._get_openai(temperature)

        logger.debug("llm_client_created", provider=self.provider, model=self.model)
        self._cache[cache_key] = client
        return client

    async def complete(self, system: str, user: str, temperature: float = 0.7) -> str:
        """Run a single system + user completion and return the text.

        Raises:
            LLMUnavailableError: If the model is unavailable or the call fails.
        """
        llm = self.get_llm(temperature)
        logger.info("llm_invocation", provider=self.provider, model=self.model)
        try:
            response = await llm.ainvoke([SystemMessage(content=system), HumanMessage(content=user)])
        except Exception as e:
            logger.warning("llm_completion_failed", provider=self.provider, error=str(e))
            raise LLMUnavailableError(str(e)) from e
        return extract_text_from_content(response.content)


# Global instance
llm_service = LLMService()
