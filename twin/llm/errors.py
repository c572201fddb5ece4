"""Mapping of upstream provider failures onto the error taxonomy.

Messages are user-facing and actionable. Raw upstream bodies are logged
server-side and never copied into the error message.
"""

import logging

from twin.domain.errors import AuthRejected, ProviderError, RateLimited, UpstreamDisconnect

logger = logging.getLogger(__name__)


def provider_error_for_status(
    provider: str,
    status_code: int | None,
    body: str | None = None,
    key_hint: str = "API key",
) -> ProviderError:
    """Build the taxonomy error for an upstream HTTP failure.

    Args:
        provider: Human readable provider label ("OpenRouter", "Gemini")
        status_code: Upstream HTTP status, if known
        body: Raw upstream response body (logged, never returned)
        key_hint: Name of the setting the operator should check

    Returns:
        AuthRejected, RateLimited or UpstreamDisconnect
    """
    if body:
        logger.warning(
            f"{provider} returned an error response",
            extra={"provider": provider, "status_code": status_code, "response_body": body[:500]},
        )

    # OpenRouter answers 401 "User not found." for invalid keys
    if status_code in (401, 403) or (body and '"User not found' in body):
        return AuthRejected(
            f"{provider} authentication failed ({status_code or 401}). "
            f"Check your {key_hint} in .env, then restart the server."
        )

    if status_code == 429:
        return RateLimited(f"{provider} rate limit hit (429). Please wait a bit and try again.")

    return UpstreamDisconnect(
        f"{provider} request failed"
        + (f" ({status_code})" if status_code else "")
        + ". Please try again."
    )
