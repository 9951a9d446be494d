"""AI package for LLM access and generation prompts.

Import directly from submodules (e.g. ``from flowgen.ai.llm import llm_service``).
"""
