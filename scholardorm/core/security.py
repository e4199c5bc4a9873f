"""Verification of Supabase-issued JWT access tokens."""

from jose import JWTError, jwt

from scholardorm.config import settings

# ── JWT tokens ────────────────────────────────────────────────────────────────


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a Supabase JWT. Returns payload dict or None on failure.

    Signature, expiry and the ``aud`` claim are all checked; the user id is
    in ``sub``.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError:
        return None
