"""Pytest fixtures for testing"""

import pytest
from typing import Callable, Generator, List, Optional, Sequence
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from discipline_gateway.api.main import create_app
from discipline_gateway.api.dependencies import get_rate_provider
from discipline_gateway.domain.models import ConversionEvent, RawContract, RawTransfer
from discipline_gateway.domain.rates import SyntheticRateModel
from discipline_gateway.infrastructure.database.models import Base
from discipline_gateway.infrastructure.database.session import get_db
from discipline_gateway.utils.date_utils import parse_timestamp

WALLET = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """FastAPI test client with test database and a seeded rate model"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_provider] = lambda: SyntheticRateModel(seed=42)
    return TestClient(app)


@pytest.fixture
def wallet_address() -> str:
    return WALLET


@pytest.fixture
def make_conversions() -> Callable[..., List[ConversionEvent]]:
    """Build ascending conversion events from ISO timestamps and amounts (default 100 each)"""

    def _make(timestamps: Sequence[str], amounts: Optional[Sequence[float]] = None) -> List[ConversionEvent]:
        amounts = amounts if amounts is not None else [100.0] * len(timestamps)
        return [
            ConversionEvent(
                timestamp=parse_timestamp(ts),
                amount=amount,
                token="USDC",
                to_address=RECIPIENT,
                hash=f"0xhash{i}",
            )
            for i, (ts, amount) in enumerate(zip(timestamps, amounts))
        ]

    return _make


@pytest.fixture
def make_transfer() -> Callable[..., RawTransfer]:
    """Build one raw transfer; outbound from the test wallet by default"""

    def _make(
        tx_hash: str,
        timestamp: Optional[str],
        value: float = 100.0,
        from_address: str = WALLET,
        to_address: Optional[str] = RECIPIENT,
    ) -> RawTransfer:
        return RawTransfer(
            block_num="0x10",
            hash=tx_hash,
            from_address=from_address,
            to_address=to_address,
            value=value,
            asset="USDC",
            category="erc20",
            raw_contract=RawContract(address="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", decimal="0x6"),
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def monthly_transfers(make_transfer) -> List[RawTransfer]:
    """Four monthly 250 USDC conversions plus one incoming deposit, newest first"""
    return [
        make_transfer("0xd", "2024-04-15T10:00:00.000Z", 250.0),
        make_transfer("0xc", "2024-03-15T10:00:00.000Z", 250.0),
        make_transfer("0xin", "2024-03-01T08:00:00.000Z", 1000.0, from_address=RECIPIENT, to_address=WALLET),
        make_transfer("0xb", "2024-02-15T10:00:00.000Z", 250.0),
        make_transfer("0xa", "2024-01-15T10:00:00.000Z", 250.0),
    ]
