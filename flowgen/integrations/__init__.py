"""Clients for the external services used by the deployment pipeline."""

from flowgen.integrations.github import GitHubClient
from flowgen.integrations.retry import is_transient, with_retries
from flowgen.integrations.vercel import VercelClient

__all__ = [
    "GitHubClient",
    "VercelClient",
    "is_transient",
    "with_retries",
]
