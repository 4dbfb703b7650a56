from pockettrader.api.auth import router as auth_router
from pockettrader.api.cards import router as cards_router
from pockettrader.api.collection import router as collection_router
from pockettrader.api.health import router as health_router
from pockettrader.api.image_proxy import router as image_proxy_router
from pockettrader.api.profiles import router as profiles_router
from pockettrader.api.trades import router as trades_router

__all__ = [
    "auth_router",
    "cards_router",
    "collection_router",
    "health_router",
    "image_proxy_router",
    "profiles_router",
    "trades_router",
]
