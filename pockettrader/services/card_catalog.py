"""
Card catalog service.

Fetches the static card feed once and keeps it in memory for the life of
the CardCatalog object. The catalog is the universe of valid card ids for
every ownership and matching computation.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Any

import httpx

from pockettrader.config import settings
from pockettrader.models.card import Card
from pockettrader.models.errors import CatalogUnavailable

logger = logging.getLogger(__name__)


def parse_catalog(payload: Any) -> tuple[Card, ...]:
    """
    Build the card list from a decoded feed payload.

    Entries without an id are skipped; a repeated id keeps its first entry.

    Raises:
        CatalogUnavailable: If the payload is not a JSON array
    """
    if not isinstance(payload, list):
        raise CatalogUnavailable(detail="Catalog feed is not a JSON array")

    cards: list[Card] = []
    seen: set[str] = set()
    for entry in payload:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        card = Card.from_feed(entry)
        if card.id in seen:
            continue
        seen.add(card.id)
        cards.append(card)
    return tuple(cards)


class CardCatalog:
    """
    Memoized accessor for the card catalog feed.

    The first get() fetches the feed; later calls return the cached cards
    without touching the network until invalidate() is called. Failed
    fetches are not cached.
    """

    def __init__(self, url: str | None = None, timeout: float | None = None) -> None:
        self.url = url or settings.catalog_url
        self.timeout = settings.catalog_timeout if timeout is None else timeout
        self._cards: tuple[Card, ...] | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._cards is not None

    async def get(self) -> tuple[Card, ...]:
        """
        Get the full catalog in feed order.

        Raises:
            CatalogUnavailable: On network error, timeout, HTTP error status
                or an unparseable payload
        """
        if self._cards is not None:
            return self._cards

        async with self._lock:
            # Another caller may have finished the fetch while we waited
            if self._cards is None:
                self._cards = await self._fetch()
        return self._cards

    async def get_or_empty(self) -> tuple[Card, ...]:
        """Get the catalog, or an empty tuple if it cannot be loaded."""
        try:
            return await self.get()
        except CatalogUnavailable:
            return ()

    def invalidate(self) -> None:
        """Drop the cached catalog so the next get() re-fetches."""
        self._cards = None

    async def _fetch(self) -> tuple[Card, ...]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            logger.error("Catalog fetch timed out after %.1fs: %s", self.timeout, self.url)
            raise CatalogUnavailable(detail=f"Timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error("Catalog fetch failed: HTTP %d", e.response.status_code)
            raise CatalogUnavailable(detail=f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error("Catalog fetch failed: %s", e)
            raise CatalogUnavailable(detail=str(e)) from e
        except ValueError as e:
            logger.error("Catalog feed is not valid JSON: %s", e)
            raise CatalogUnavailable(detail="Catalog feed is not valid JSON") from e

        cards = parse_catalog(payload)
        logger.info("Loaded %d cards from catalog feed", len(cards))
        return cards


def index_by_id(cards: Iterable[Card]) -> dict[str, Card]:
    """Map card id to card."""
    return {card.id: card for card in cards}


def filter_cards(
    cards: Sequence[Card],
    search: str | None = None,
    pack: str | None = None,
    card_type: str | None = None,
    rarity: str | None = None,
) -> list[Card]:
    """
    Filter the catalog the way the card browser does.

    Args:
        cards: Catalog cards
        search: Case-insensitive substring of the card name
        pack: Exact pack name; None or "all" keeps every pack
        card_type: Exact type; None or "all" keeps every type
        rarity: Exact rarity symbol; None or "all" keeps every rarity

    Returns:
        Matching cards in catalog order
    """
    needle = (search or "").strip().lower()

    def keep(value: str, wanted: str | None) -> bool:
        return wanted in (None, "", "all") or value == wanted

    return [
        card
        for card in cards
        if (not needle or needle in card.name.lower())
        and keep(card.pack, pack)
        and keep(card.type, card_type)
        and keep(card.rarity, rarity)
    ]


def distinct_values(cards: Iterable[Card]) -> dict[str, list[str]]:
    """Sorted distinct packs, types and rarities for filter pickers."""
    cards = list(cards)
    return {
        "packs": sorted({c.pack for c in cards if c.pack}),
        "types": sorted({c.type for c in cards if c.type}),
        "rarities": sorted({c.rarity for c in cards if c.rarity}),
    }
