"""
Trade matching.

For each card a user is missing, finds the other users who have it, and
optionally what the user could offer each of them in return. Pure
functions over already-fetched data: no I/O, safe to run anywhere.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from pockettrader.models.card import Card
from pockettrader.models.profile import UserProfile


@dataclass(frozen=True)
class MatchedUser:
    """
    Another user who owns a card the requester needs.

    Attributes:
        user_id: The other user's id
        display_name: Username, or "User <friend code>" when unset
        friend_code: Code to add them in-game
        cards_they_need_that_i_own: Cards the requester could offer them,
            in catalog order
    """

    user_id: str
    display_name: str
    friend_code: str
    cards_they_need_that_i_own: tuple[Card, ...] = ()


@dataclass(frozen=True)
class TradeOpportunity:
    """A card the requester lacks and the users known to hold it."""

    card: Card
    users_with_card: list[MatchedUser] = field(default_factory=list)


def select_candidates(
    profiles_by_id: Mapping[str, UserProfile],
    others_missing: Mapping[str, set[str]],
    active_only: bool,
) -> list[UserProfile]:
    """
    Pick the profiles that may be matched.

    In active-only mode a profile qualifies only if it has at least one
    missing-card record; otherwise every profile qualifies.
    """
    if not active_only:
        return list(profiles_by_id.values())
    return [
        profile
        for user_id, profile in profiles_by_id.items()
        if others_missing.get(user_id)
    ]


def cards_they_need_that_i_own(
    catalog: Sequence[Card],
    my_missing: set[str],
    their_missing: set[str],
) -> tuple[Card, ...]:
    """Their missing cards that the requester owns, restricted to the catalog."""
    return tuple(
        card for card in catalog if card.id in their_missing and card.id not in my_missing
    )


def find_trade_opportunities(
    catalog: Sequence[Card],
    my_missing: Iterable[str],
    others_missing: Mapping[str, set[str]],
    profiles_by_id: Mapping[str, UserProfile],
    active_only: bool = False,
    include_reciprocal: bool = True,
) -> list[TradeOpportunity]:
    """
    Find who can give the requester each card they are missing.

    A candidate "has" a card when it is not in their missing set. Cards
    that nobody has, or that are not in the catalog, produce no
    opportunity. Opportunities are ordered by how few users hold the card
    (rarest first); ties keep the order in which my_missing was supplied.

    Args:
        catalog: Every known card
        my_missing: Card ids the requester lacks, in traversal order
        others_missing: Missing card ids per other user
        profiles_by_id: Profiles of the other users under consideration
        active_only: Only match users with at least one missing card
        include_reciprocal: Attach what the requester can offer each match

    Returns:
        Trade opportunities sorted ascending by number of holders
    """
    candidates = select_candidates(profiles_by_id, others_missing, active_only)
    if not candidates:
        return []

    # dict.fromkeys keeps first-seen order while dropping duplicates
    wanted = list(dict.fromkeys(my_missing))
    wanted_set = set(wanted)
    cards_by_id = {card.id: card for card in catalog}

    offers: dict[str, tuple[Card, ...]] = {}
    if include_reciprocal:
        for profile in candidates:
            offers[profile.id] = cards_they_need_that_i_own(
                catalog, wanted_set, others_missing.get(profile.id, set())
            )

    opportunities: list[TradeOpportunity] = []
    for card_id in wanted:
        card = cards_by_id.get(card_id)
        if card is None:
            continue

        holders = [
            MatchedUser(
                user_id=profile.id,
                display_name=profile.display_name,
                friend_code=profile.friend_code,
                cards_they_need_that_i_own=offers.get(profile.id, ()),
            )
            for profile in candidates
            if card_id not in others_missing.get(profile.id, set())
        ]
        if holders:
            opportunities.append(TradeOpportunity(card=card, users_with_card=holders))

    # sorted() is stable, so equal counts keep traversal order
    return sorted(opportunities, key=lambda o: len(o.users_with_card))
