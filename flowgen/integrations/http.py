"""Shared response handling for the REST integrations."""

import httpx

from flowgen.core.errors import IntegrationError


def raise_for_status(response: httpx.Response, service: str, action: str) -> None:
    """Turn a non-2xx response into an ``IntegrationError`` with the API's message."""
    if response.is_success:
        return
    detail = response.text
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            detail = error.get("message") or detail
        else:
            detail = data.get("message") or detail
    raise IntegrationError(
        service,
        f"{action} failed with HTTP {response.status_code}: {detail[:300]}",
        status_code=response.status_code,
    )
