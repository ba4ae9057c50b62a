"""Credential extraction from inbound requests.

Tokens arrive either in an httpOnly cookie set at login or in an
``Authorization: Bearer <token>`` header. The cookie wins when both are present.
"""

from collections.abc import Mapping

BEARER_SCHEME = "bearer"


def parse_bearer(authorization: str | None) -> str | None:
    """Return the token from a Bearer Authorization header value.

    Args:
        authorization: The raw header value, e.g. ``"Bearer abc.def.ghi"``.

    Returns:
        The token, or None when the header is absent, empty, or uses another scheme.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None
    return parts[1]


def extract_token(
    cookies: Mapping[str, str] | None,
    authorization: str | None,
    cookie_name: str,
) -> str | None:
    """Extract a token, preferring the named cookie over the Authorization header.

    Args:
        cookies: Request cookies.
        authorization: Authorization header value, if any.
        cookie_name: Cookie that carries this kind of token.

    Returns:
        The token string, or None when no credential was presented.
    """
    if cookies:
        token = cookies.get(cookie_name)
        if token and token.strip():
            return token.strip()
    return parse_bearer(authorization)
