from dataclasses import dataclass
from typing import Any

_TRUTHY_FLAGS = {"yes", "true", "1"}


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUTHY_FLAGS


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card from the static catalog feed.

    Attributes:
        id: Stable catalog identifier (e.g., "a1-001")
        name: Card name
        pack: Set/expansion the card is pulled from
        type: Element or category (e.g., "grass", "trainer")
        rarity: Rarity symbol; more diamonds means rarer
        health: Hit points as printed (empty for non-Pokemon cards)
        is_full_art: Full-art printing
        is_ex: ex card
        image: Absolute image URL on the catalog host
        artist: Illustrator credit
    """

    id: str
    name: str
    pack: str = ""
    type: str = ""
    rarity: str = ""
    health: str = ""
    is_full_art: bool = False
    is_ex: bool = False
    image: str = ""
    artist: str = ""

    @classmethod
    def from_feed(cls, data: dict[str, Any]) -> "Card":
        """
        Build a Card from one object of the catalog feed.

        Raises:
            KeyError: If the object has no id
        """
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            pack=str(data.get("pack") or ""),
            type=str(data.get("type") or ""),
            rarity=str(data.get("rarity") or ""),
            health=str(data.get("health") or ""),
            is_full_art=_flag(data.get("fullart")),
            is_ex=_flag(data.get("ex")),
            image=str(data.get("image") or ""),
            artist=str(data.get("artist") or ""),
        )
