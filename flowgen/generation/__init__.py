"""Artifact generators for canvas nodes.

Each generator tries the configured LLM first and falls back to a
deterministic keyword-driven result when the model is unavailable.
"""
