"""Domain exceptions shared across FlowGen.

Routers translate these into HTTP responses; services raise them and let
them propagate.
"""


class FlowGenError(Exception):
    """Base class for all FlowGen errors."""


class InvalidRequestError(FlowGenError):
    """Raised when caller input fails validation (HTTP 400)."""


class NotFoundError(FlowGenError):
    """Raised when a flow, node, edge or deployment does not exist (HTTP 404)."""


class LLMUnavailableError(FlowGenError):
    """Raised when the LLM is not configured or the completion call failed.

    Generators catch this and switch to their deterministic fallback.
    """


class GenerationError(FlowGenError):
    """Raised when model output cannot be turned into a usable artifact."""


class IntegrationError(FlowGenError):
    """Raised when an external service (GitHub, Vercel) rejects a request."""

    def __init__(self, service: str, message: str, status_code: int | None = None) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service}: {message}")

    @property
    def is_conflict(self) -> bool:
        return self.status_code in (409, 422)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class DeploymentError(FlowGenError):
    """Raised when a required deployment stage fails and the run must abort."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(message)
