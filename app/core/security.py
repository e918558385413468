from jose import jwt

from app.core.config import settings


def decode_token(token: str) -> dict:
    """Verify an identity-provider bearer token and return its claims."""
    options = {"verify_aud": bool(settings.AUTH_AUDIENCE)}
    kwargs = {}
    if settings.AUTH_AUDIENCE:
        kwargs["audience"] = settings.AUTH_AUDIENCE
    if settings.AUTH_ISSUER:
        kwargs["issuer"] = settings.AUTH_ISSUER
    return jwt.decode(
        token,
        settings.AUTH_SECRET_KEY,
        algorithms=[settings.AUTH_ALGORITHM],
        options=options,
        **kwargs,
    )


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def resolve_user_id(authorization: str | None) -> str | None:
    """IdP subject for an Authorization header, or None for anonymous callers.

    Raises when a token is present but cannot be verified; callers decide whether
    that means 401 or a silent downgrade to anonymous.
    """
    token = bearer_token(authorization)
    if token is None:
        return None
    payload = decode_token(token)
    return payload.get("sub") or None
