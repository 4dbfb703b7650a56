import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pockettrader.api.deps import get_catalog
from pockettrader.db.database import get_session
from pockettrader.main import app
from pockettrader.models.card import Card
from pockettrader.models.db import Base
from pockettrader.models.errors import BackendUnavailable
from pockettrader.services.card_catalog import CardCatalog

CATALOG_URL = "https://catalog.test/cards.json"


class StaticCatalog(CardCatalog):
    """A catalog that is already loaded and never touches the network."""

    def __init__(self, cards: list[Card]) -> None:
        super().__init__(url=CATALOG_URL)
        self._cards = tuple(cards)


@pytest.fixture
def sample_cards() -> list[Card]:
    """Three cards across two packs."""
    return [
        Card(id="a1-001", name="Bulbasaur", pack="Genetic Apex", type="grass", rarity="◊"),
        Card(id="a1-002", name="Ivysaur", pack="Genetic Apex", type="grass", rarity="◊◊"),
        Card(id="a1-033", name="Charmander", pack="Mythical Island", type="fire", rarity="◊"),
    ]


@pytest.fixture
def sample_feed() -> list[dict]:
    """Catalog feed entries as served by the feed host."""
    return [
        {
            "id": "a1-001",
            "name": "Bulbasaur",
            "rarity": "◊",
            "pack": "Genetic Apex",
            "health": "70",
            "image": "https://images.test/a1-001.webp",
            "fullart": "No",
            "ex": "No",
            "artist": "Narumi Sato",
            "type": "grass",
        },
        {
            "id": "a1-004",
            "name": "Venusaur ex",
            "rarity": "◊◊◊◊",
            "pack": "Genetic Apex",
            "health": "190",
            "image": "https://images.test/a1-004.webp",
            "fullart": "No",
            "ex": "Yes",
            "artist": "PLANETA CG Works",
            "type": "grass",
        },
    ]


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def catalog(sample_cards: list[Card]) -> StaticCatalog:
    return StaticCatalog(sample_cards)


@pytest.fixture
async def client(async_engine, catalog: CardCatalog):
    """Provide an async test client with overridden database session and catalog."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise BackendUnavailable(detail=str(e)) from e

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_catalog] = lambda: catalog

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sign_up(client: AsyncClient):
    """Register a user through the API and return auth headers for them."""

    async def _sign_up(
        email: str,
        friend_code: str,
        username: str | None = None,
        password: str = "pikachu123",
    ) -> dict[str, str]:
        body = {"email": email, "password": password, "friend_code": friend_code}
        if username is not None:
            body["username"] = username
        response = await client.post("/auth/signup", json=body)
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _sign_up
