"""
Card catalog API endpoints.

Browse and filter the shared card catalog.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from pockettrader.api.deps import CatalogDep
from pockettrader.models.card import Card
from pockettrader.models.errors import NotFound
from pockettrader.services.card_catalog import distinct_values, filter_cards, index_by_id

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """A catalog card."""

    id: str
    name: str
    pack: str
    type: str
    rarity: str
    health: str
    is_full_art: bool
    is_ex: bool
    image: str
    artist: str


class CardListResponse(BaseModel):
    total: int
    cards: list[CardResponse] = Field(default_factory=list)


class CardFiltersResponse(BaseModel):
    """Values available for the pack/type/rarity pickers."""

    packs: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    rarities: list[str] = Field(default_factory=list)


def card_to_response(card: Card) -> CardResponse:
    return CardResponse(
        id=card.id,
        name=card.name,
        pack=card.pack,
        type=card.type,
        rarity=card.rarity,
        health=card.health,
        is_full_art=card.is_full_art,
        is_ex=card.is_ex,
        image=card.image,
        artist=card.artist,
    )


@router.get("", response_model=CardListResponse)
async def list_cards(
    catalog: CatalogDep,
    search: str | None = None,
    pack: str | None = None,
    type: str | None = None,
    rarity: str | None = None,
) -> CardListResponse:
    """
    List catalog cards, optionally filtered.

    `search` matches a case-insensitive substring of the name; `pack`,
    `type` and `rarity` match exactly ("all" disables a filter).
    """
    cards = filter_cards(
        await catalog.get(), search=search, pack=pack, card_type=type, rarity=rarity
    )
    return CardListResponse(total=len(cards), cards=[card_to_response(c) for c in cards])


@router.get("/filters", response_model=CardFiltersResponse)
async def card_filters(catalog: CatalogDep) -> CardFiltersResponse:
    """Distinct packs, types and rarities in the catalog."""
    return CardFiltersResponse(**distinct_values(await catalog.get()))


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(card_id: str, catalog: CatalogDep) -> CardResponse:
    """Get a single card by id."""
    card = index_by_id(await catalog.get()).get(card_id)
    if card is None:
        raise NotFound(f"Card '{card_id}' not found")
    return card_to_response(card)
