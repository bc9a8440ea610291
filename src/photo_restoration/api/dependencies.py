"""Shared request dependencies."""

from fastapi import Header, HTTPException, status

from photo_restoration.config import parse_identity


async def require_actor(x_actor: str | None = Header(default=None)) -> str:
    """Return the calling identity from the X-Actor header."""
    actor = parse_identity(x_actor)
    if actor is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return actor
