"""Shared test fixtures."""

import asyncio
import itertools
from decimal import Decimal

import httpx
import pytest
from cryptography.fernet import Fernet
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from coinforge.config import settings
from coinforge.db.base import Base
# Import all models to register with Base.metadata
import coinforge.db.models  # noqa: F401
from coinforge.repositories.account_repo import AccountRepository
from coinforge.services.generation.provider import GeneratedImage, GenerationProvider
from coinforge.services.security import encrypt_secret, hash_password
from coinforge.services.wallet import WalletKeys, WalletProvider

SAMPLE_DOCUMENT = """```html
<!DOCTYPE html>
<html>
<head><title>Doge Rocket</title></head>
<body>
<nav><img src="IMAGE_PLACEHOLDER_LOGO" alt="logo"></nav>
<section style="background-image: url('IMAGE_PLACEHOLDER_BG')"><h1>Doge Rocket</h1></section>
<footer><img src="IMAGE_PLACEHOLDER_LOGO" alt="logo"></footer>
</body>
</html>
```"""

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-image"


class FakeGenerationProvider(GenerationProvider):
    """In-memory provider recording every call."""

    name = "fake"

    def __init__(self, document: str = SAMPLE_DOCUMENT, text_error=None, image_error=None, delay: float = 0.0):
        self.document = document
        self.text_error = text_error
        self.image_error = image_error
        self.delay = delay
        self.document_calls: list[tuple[str, str]] = []
        self.image_calls: list[tuple[str, str]] = []

    async def generate_document(self, system_prompt: str, user_prompt: str) -> str:
        self.document_calls.append((system_prompt, user_prompt))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.text_error is not None:
            raise self.text_error
        return self.document

    async def generate_image(self, prompt: str, size: str) -> GeneratedImage:
        self.image_calls.append((prompt, size))
        if self.image_error is not None:
            raise self.image_error
        return GeneratedImage(FAKE_PNG)


class FakeWalletProvider(WalletProvider):
    def __init__(self):
        self._counter = itertools.count(1)

    async def create_wallet(self) -> WalletKeys:
        n = next(self._counter)
        return WalletKeys(
            receiving_address=f"kaspa:qfakewallet{n:04d}",
            mnemonic=f"abandon ability able about above absent absorb abstract absurd abuse access {n}",
            xprv=f"xprv-fake-{n}",
        )


@pytest.fixture(autouse=True)
def wallet_encryption_key(monkeypatch):
    key = Fernet.generate_key().decode()
    monkeypatch.setattr(settings, "wallet_encryption_key", key)
    return key


@pytest.fixture
async def db_engine(tmp_path):
    """File-backed SQLite engine so concurrent sessions use separate connections."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'coinforge_test.db'}",
        echo=False,
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_account(session_factory):
    """Factory inserting an account with the given balance."""
    counter = itertools.count(1)

    async def _make(wallet_address: str | None = None, credits="0", password: str = "hunter2"):
        n = next(counter)
        async with session_factory() as session:
            account = await AccountRepository(session).create(
                account_id=f"acct_test{n:04d}",
                username=f"user{n}",
                wallet_address=wallet_address or f"kaspa:qtestaccount{n:04d}",
                credential_hash=hash_password(password),
                wallet_secret_encrypted=encrypt_secret('{"mnemonic": "test words", "xPrv": "xprv-test"}'),
                credits=Decimal(credits),
            )
            await session.commit()
        return account

    return _make


@pytest.fixture
def get_balance(session_factory):
    async def _get(account_id: str) -> Decimal:
        async with session_factory() as session:
            return await AccountRepository(session).get_credits(account_id)

    return _get


@pytest.fixture
def fake_provider():
    return FakeGenerationProvider()


@pytest.fixture
def fake_wallet_provider():
    return FakeWalletProvider()


@pytest.fixture
def indexer_routes():
    """Mutable route table for the mocked indexer HTTP transport: path -> handler."""
    return {}


@pytest.fixture
async def indexer_client(indexer_routes):
    def handler(request: httpx.Request) -> httpx.Response:
        route = indexer_routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def app(session_factory, fake_provider, fake_wallet_provider):
    """Create a test application instance with fakes installed on app.state."""
    from coinforge.main import create_app, install_services

    _app = create_app()
    install_services(
        _app,
        session_factory,
        provider=fake_provider,
        adapters=[],
        wallet_provider=fake_wallet_provider,
    )
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await app.state.generation_launcher.drain()
