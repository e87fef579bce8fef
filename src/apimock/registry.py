"""Registry of mockable APIs and the URLs their OpenAPI specs are fetched from.

The registry is static: every :class:`~apimock.models.ApiName` member has
exactly one source URL, and :func:`validate_api` rejects anything else
before a single byte of I/O happens.
"""

from __future__ import annotations

from apimock.exceptions import UnsupportedApiError
from apimock.models import ApiName

API_SPECS: dict[ApiName, str] = {
    ApiName.SMS: "https://developer.vonage.com/api/v1/developer/api/file/sms?format=json&vendorId=vonage",
}
"""Maps each API to the URL of its OpenAPI document (JSON)."""


def supported_apis() -> list[str]:
    """Return the registered API names, sorted."""
    return sorted(api.value for api in API_SPECS)


def validate_api(name: str | ApiName) -> ApiName:
    """Return the :class:`ApiName` for *name*.

    Raises:
        UnsupportedApiError: If *name* is not a registered API.
    """
    try:
        api = ApiName(name)
    except ValueError:
        raise UnsupportedApiError(
            f"Unsupported API '{name}'. Choose from: {', '.join(supported_apis())}"
        ) from None
    if api not in API_SPECS:
        raise UnsupportedApiError(f"No spec source registered for API '{api.value}'")
    return api


def spec_url(name: str | ApiName) -> str:
    """Return the spec URL for a registered API."""
    return API_SPECS[validate_api(name)]
