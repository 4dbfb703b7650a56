"""
Trade API endpoints.

Find other users who hold the cards the signed-in user is missing.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from pockettrader.api.cards import CardResponse, card_to_response
from pockettrader.api.deps import CatalogDep, CurrentUserId, SessionDep
from pockettrader.db import list_missing, list_other_profiles, list_others_missing
from pockettrader.services.trade_matching import TradeOpportunity, find_trade_opportunities

router = APIRouter(prefix="/trades", tags=["trades"])


class MatchedUserResponse(BaseModel):
    """A user who has the card, and what they could take in return."""

    user_id: str
    display_name: str
    friend_code: str
    cards_they_need_that_i_own: list[CardResponse] = Field(default_factory=list)


class OpportunityResponse(BaseModel):
    card: CardResponse
    users_with_card: list[MatchedUserResponse] = Field(default_factory=list)


class TradesResponse(BaseModel):
    """Response model for trade matching."""

    active_only: bool
    total: int
    users_considered: int
    opportunities: list[OpportunityResponse] = Field(default_factory=list)


def _opportunity_response(opportunity: TradeOpportunity) -> OpportunityResponse:
    return OpportunityResponse(
        card=card_to_response(opportunity.card),
        users_with_card=[
            MatchedUserResponse(
                user_id=user.user_id,
                display_name=user.display_name,
                friend_code=user.friend_code,
                cards_they_need_that_i_own=[
                    card_to_response(c) for c in user.cards_they_need_that_i_own
                ],
            )
            for user in opportunity.users_with_card
        ],
    )


@router.get("", response_model=TradesResponse)
async def get_trades(
    user_id: CurrentUserId,
    session: SessionDep,
    catalog: CatalogDep,
    active_only: bool = False,
    include_reciprocal: bool = True,
    search: str | None = None,
) -> TradesResponse:
    """
    Trade opportunities for the signed-in user, rarest-held cards first.

    With `active_only`, only users who have marked at least one card
    missing are matched. `search` filters opportunities by a
    case-insensitive substring of the card name.
    """
    cards = await catalog.get()
    my_missing = sorted(await list_missing(session, user_id))
    others_missing = await list_others_missing(session, user_id)
    profiles = await list_other_profiles(session, user_id)

    opportunities = find_trade_opportunities(
        catalog=cards,
        my_missing=my_missing,
        others_missing=others_missing,
        profiles_by_id={p.id: p for p in profiles},
        active_only=active_only,
        include_reciprocal=include_reciprocal,
    )

    needle = (search or "").strip().lower()
    if needle:
        opportunities = [o for o in opportunities if needle in o.card.name.lower()]

    return TradesResponse(
        active_only=active_only,
        total=len(opportunities),
        users_considered=len(profiles),
        opportunities=[_opportunity_response(o) for o in opportunities],
    )
