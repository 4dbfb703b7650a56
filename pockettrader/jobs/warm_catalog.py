"""
Check the card catalog feed.

Fetches the feed once and logs how many cards each pack has. Useful after
a feed update, or to confirm the configured catalog URL is reachable.
"""

import asyncio
import logging
import sys
from collections import Counter

from pockettrader.config import settings
from pockettrader.models.errors import CatalogUnavailable
from pockettrader.services.card_catalog import CardCatalog

logger = logging.getLogger(__name__)


async def run_warm(catalog: CardCatalog | None = None) -> Counter[str]:
    """
    Load the catalog and count cards per pack.

    Raises:
        CatalogUnavailable: If the feed cannot be fetched or parsed
    """
    catalog = catalog or CardCatalog()
    logger.info("Fetching card catalog from %s...", catalog.url)

    try:
        cards = await catalog.get()
    except CatalogUnavailable as e:
        logger.error("Failed to load card catalog: %s", e.detail or e.message)
        raise

    per_pack = Counter(card.pack or "(no pack)" for card in cards)
    for pack, count in sorted(per_pack.items()):
        logger.info("%s: %d cards", pack, count)
    logger.info("Catalog loaded: %d cards in %d packs", len(cards), len(per_pack))
    return per_pack


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        asyncio.run(run_warm())
    except CatalogUnavailable:
        sys.exit(1)


if __name__ == "__main__":
    main()
