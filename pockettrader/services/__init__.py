"""
PocketTrader services.

Business logic for the card catalog, collection progress and trade matching.
Authentication lives in pockettrader.services.auth and is imported from there
directly since it depends on the database layer.
"""

from pockettrader.services.card_catalog import (
    CardCatalog,
    distinct_values,
    filter_cards,
    index_by_id,
    parse_catalog,
)
from pockettrader.services.friend_code import (
    format_friend_code,
    generate_random_friend_code,
    is_valid_friend_code,
    placeholder_username,
)
from pockettrader.services.progress import (
    ALL_PACKS,
    PackProgress,
    calculate_pack_progress,
    completion_percentage,
)
from pockettrader.services.trade_matching import (
    MatchedUser,
    TradeOpportunity,
    cards_they_need_that_i_own,
    find_trade_opportunities,
    select_candidates,
)

__all__ = [
    "ALL_PACKS",
    "CardCatalog",
    "MatchedUser",
    "PackProgress",
    "TradeOpportunity",
    "calculate_pack_progress",
    "cards_they_need_that_i_own",
    "completion_percentage",
    "distinct_values",
    "filter_cards",
    "find_trade_opportunities",
    "format_friend_code",
    "generate_random_friend_code",
    "index_by_id",
    "is_valid_friend_code",
    "parse_catalog",
    "placeholder_username",
    "select_candidates",
]
