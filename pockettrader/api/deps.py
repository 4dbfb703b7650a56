"""
Shared request dependencies.

The card catalog and the current user are injected into handlers here so
tests can swap them through app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Header, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from pockettrader.db.database import commit_session, get_session
from pockettrader.services.auth import resolve_user
from pockettrader.services.card_catalog import CardCatalog


def get_catalog(request: Request) -> CardCatalog:
    """The catalog constructed for this application at startup."""
    catalog: CardCatalog | None = getattr(request.app.state, "catalog", None)
    if catalog is None:
        catalog = CardCatalog()
        request.app.state.catalog = catalog
    return catalog


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an "Authorization: Bearer <token>" header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user_id(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    authorization: Annotated[str | None, Header()] = None,
    x_refresh_token: Annotated[str | None, Header()] = None,
) -> str:
    """
    Resolve the signed-in user.

    If the access token expired and X-Refresh-Token was sent, the session
    is renewed once and the new tokens are returned in the X-Access-Token
    and X-Refresh-Token response headers.
    """
    user_id, renewed = await resolve_user(session, bearer_token(authorization), x_refresh_token)
    if renewed is not None:
        await commit_session(session)
        response.headers["X-Access-Token"] = renewed.access_token
        response.headers["X-Refresh-Token"] = renewed.refresh_token
    return user_id


CatalogDep = Annotated[CardCatalog, Depends(get_catalog)]
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]
