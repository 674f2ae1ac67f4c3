"""Shared test fixtures: in-memory store, fake repositories and wired services."""

from unittest.mock import MagicMock

import pytest

from src.pm_exchange.application.service import ExchangeService
from src.pm_liquidity.application.service import LiquidityPoolService
from src.pm_market.application.service import MarketLifecycleService
from src.pm_order.application.service import OrderBookService
from src.pm_settlement.application.service import SettlementService
from tests.fakes import (
    FakeLiquidityRepository,
    FakeMarketRepository,
    FakeOrderRepository,
    FakePositionRepository,
    FakeSession,
    FakeSessionFactory,
    FakeSettlementRepository,
    InMemoryStore,
)


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.categories["pitching"] = ["BALL", "STRIKE"]
    s.categories["inning"] = ["TOP", "BOTTOM", "EXTRA"]
    return s


@pytest.fixture
def session(store: InMemoryStore) -> FakeSession:
    return FakeSession(store)


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()


@pytest.fixture
def market_repo(store: InMemoryStore) -> FakeMarketRepository:
    return FakeMarketRepository(store)


@pytest.fixture
def order_repo(store: InMemoryStore) -> FakeOrderRepository:
    return FakeOrderRepository(store)


@pytest.fixture
def lp_repo(store: InMemoryStore) -> FakeLiquidityRepository:
    return FakeLiquidityRepository(store)


@pytest.fixture
def market_service(market_repo: FakeMarketRepository) -> MarketLifecycleService:
    return MarketLifecycleService(repo=market_repo)


@pytest.fixture
def order_service(order_repo: FakeOrderRepository) -> OrderBookService:
    return OrderBookService(repo=order_repo)


@pytest.fixture
def lp_service(lp_repo: FakeLiquidityRepository) -> LiquidityPoolService:
    return LiquidityPoolService(repo=lp_repo)


@pytest.fixture
def settlement_service(
    store: InMemoryStore, market_repo: FakeMarketRepository
) -> SettlementService:
    return SettlementService(
        positions=FakePositionRepository(store),
        settlements=FakeSettlementRepository(store),
        markets=market_repo,
    )


@pytest.fixture
def exchange(
    store: InMemoryStore,
    market_service: MarketLifecycleService,
    order_service: OrderBookService,
    lp_service: LiquidityPoolService,
    settlement_service: SettlementService,
) -> ExchangeService:
    return ExchangeService(
        session_factory=FakeSessionFactory(store),
        markets=market_service,
        orders=order_service,
        liquidity=lp_service,
        settlement=settlement_service,
    )
