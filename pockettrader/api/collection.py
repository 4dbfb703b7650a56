"""
Collection API endpoints.

Mark cards missing or owned and report completion per pack. Every write
is committed before the response is built, so the returned state is always
what the store holds.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from pockettrader.api.deps import CatalogDep, CurrentUserId, SessionDep
from pockettrader.db import commit_session, list_missing, mark_missing, mark_owned
from pockettrader.models.card import Card
from pockettrader.models.errors import NotFound
from pockettrader.services.card_catalog import index_by_id
from pockettrader.services.progress import calculate_pack_progress

router = APIRouter(prefix="/collection", tags=["collection"])


class CollectionResponse(BaseModel):
    """Response model for a user's collection state."""

    user_id: str
    missing: list[str] = Field(
        default_factory=list,
        description="Ids of cards marked missing; every other catalog card is owned",
    )
    missing_count: int = 0
    owned_count: int | None = Field(
        default=None,
        description="Owned catalog cards; null while the catalog is unavailable",
    )
    total_cards: int | None = Field(
        default=None,
        description="Catalog size; null while the catalog is unavailable",
    )


class PackProgressResponse(BaseModel):
    pack: str
    owned: int
    total: int
    percentage: int = Field(ge=0, le=100)
    is_complete: bool


def _collection_response(
    user_id: str, missing: set[str], catalog: tuple[Card, ...]
) -> CollectionResponse:
    # An empty catalog means it could not be loaded, not that no cards exist
    if not catalog:
        return CollectionResponse(
            user_id=user_id, missing=sorted(missing), missing_count=len(missing)
        )

    catalog_ids = {card.id for card in catalog}
    return CollectionResponse(
        user_id=user_id,
        missing=sorted(missing),
        missing_count=len(missing),
        owned_count=len(catalog_ids - missing),
        total_cards=len(catalog_ids),
    )


@router.get("/me", response_model=CollectionResponse)
async def get_my_collection(
    user_id: CurrentUserId, session: SessionDep, catalog: CatalogDep
) -> CollectionResponse:
    """Get the cards the signed-in user is missing."""
    missing = await list_missing(session, user_id)
    return _collection_response(user_id, missing, await catalog.get_or_empty())


@router.put("/me/missing/{card_id}", response_model=CollectionResponse)
async def mark_card_missing(
    card_id: str, user_id: CurrentUserId, session: SessionDep, catalog: CatalogDep
) -> CollectionResponse:
    """
    Mark a card as missing.

    Only catalog cards can be marked. Marking twice is harmless.
    """
    cards = await catalog.get()
    if card_id not in index_by_id(cards):
        raise NotFound(f"Card '{card_id}' not found")

    await mark_missing(session, user_id, card_id)
    await commit_session(session)
    return _collection_response(user_id, await list_missing(session, user_id), cards)


@router.delete("/me/missing/{card_id}", response_model=CollectionResponse)
async def mark_card_owned(
    card_id: str, user_id: CurrentUserId, session: SessionDep, catalog: CatalogDep
) -> CollectionResponse:
    """Mark a card as owned. Marking an owned card is harmless."""
    await mark_owned(session, user_id, card_id)
    await commit_session(session)
    missing = await list_missing(session, user_id)
    return _collection_response(user_id, missing, await catalog.get_or_empty())


@router.get("/me/progress", response_model=list[PackProgressResponse])
async def get_my_progress(
    user_id: CurrentUserId, session: SessionDep, catalog: CatalogDep
) -> list[PackProgressResponse]:
    """Completion per pack plus an "All Packs" row, most complete first."""
    cards = await catalog.get()
    missing = await list_missing(session, user_id)

    return [
        PackProgressResponse(
            pack=row.pack,
            owned=row.owned,
            total=row.total,
            percentage=row.percentage,
            is_complete=row.is_complete,
        )
        for row in calculate_pack_progress(cards, missing)
    ]
