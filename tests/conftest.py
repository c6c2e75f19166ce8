import os
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from api import auth, dependencies  # noqa: E402
from data.database import build_engine, get_db, init_db  # noqa: E402
from main import app  # noqa: E402
from models.insight import InsightGenerator  # noqa: E402
from utils.exceptions import UpstreamError  # noqa: E402


class FakeFetcher:
    """Stands in for EnvironmentDataFetcher; each attribute is a value or an exception to raise"""

    def __init__(self, air_quality=None, traffic=None, area=None, hourly=None,
                 tomtom=None, positionstack=None):
        self.air_quality = air_quality if air_quality is not None else UpstreamError("Open-Meteo", "down")
        self.traffic = traffic if traffic is not None else UpstreamError("TomTom", "down")
        self.area = area if area is not None else UpstreamError("Mapbox", "down")
        self.hourly = hourly if hourly is not None else UpstreamError("Open-Meteo history", "down")
        self.tomtom = tomtom if tomtom is not None else []
        self.positionstack = positionstack if positionstack is not None else []
        self.calls = []

    def _answer(self, name, value):
        self.calls.append(name)
        if isinstance(value, BaseException):
            raise value
        return value

    def fetch_air_quality(self, lat, lon):
        return self._answer("air_quality", self.air_quality)

    def fetch_traffic_flow(self, lat, lon):
        return self._answer("traffic", self.traffic)

    def fetch_area_features(self, lat, lon):
        return self._answer("area", self.area)

    def fetch_hourly_aqi_history(self, lat, lon, past_days=None):
        return self._answer("hourly", self.hourly)

    def search_tomtom(self, query):
        return self._answer("tomtom", self.tomtom)

    def search_positionstack(self, query):
        return self._answer("positionstack", self.positionstack)


class StaticVerifier(auth.IdentityVerifier):
    def __init__(self, tokens):
        self.tokens = tokens

    def verify(self, token):
        if token not in self.tokens:
            raise auth.AuthenticationError("unknown token")
        return self.tokens[token]


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=4)
    yield pool
    pool.shutdown(wait=False, cancel_futures=True)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    yield session
    session.close()


@pytest.fixture
def client(db_engine, fake_fetcher, executor):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[dependencies.get_fetcher] = lambda: fake_fetcher
    app.dependency_overrides[dependencies.get_executor] = lambda: executor
    app.dependency_overrides[dependencies.get_insight_generator] = lambda: InsightGenerator(api_key="")
    app.dependency_overrides[auth.get_identity_verifier] = lambda: StaticVerifier(
        {"token-alice": "auth0|alice", "token-bob": "auth0|bob"}
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
