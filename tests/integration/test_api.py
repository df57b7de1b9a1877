"""
Integration tests for the API layer.

Route handlers receive their use cases through dependencies, so tests
override the repository and cache dependencies with mocks and an in-memory
cache.
"""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from weapon_market.api.dependencies import get_cache_store, get_listing_repo
from weapon_market.api.main import app
from weapon_market.application.errors import PersistenceError
from weapon_market.config import settings
from weapon_market.domain.entities.weapon_listing import WeaponListing
from weapon_market.infrastructure.cache.memory_cache_store import InMemoryCacheStore

API_KEY = "test-writer-key"
AUTH = {"X-API-Key": API_KEY}


def _make_listing(weapon_id: str = "1", **overrides) -> WeaponListing:  # type: ignore[no-untyped-def]
    defaults = dict(
        network="bsc",
        weapon_id=weapon_id,
        price=Decimal("2.5"),
        weapon_stars=4,
        weapon_element="fire",
        stat1_element="str",
        stat1_value=150,
        timestamp=1_700_000_000,
        seller_address="0xseller",
    )
    defaults.update(overrides)
    return WeaponListing(**defaults)


def _make_repo(results: list[WeaponListing] | None = None, total: int = 0) -> MagicMock:
    repo = MagicMock()
    repo.find = AsyncMock(return_value=results or [])
    repo.count = AsyncMock(return_value=total)
    repo.find_one = AsyncMock(return_value=None)
    repo.replace_or_insert = AsyncMock()
    repo.insert_snapshot = AsyncMock()
    repo.remove_one = AsyncMock()
    repo.remove_many = AsyncMock(return_value=0)
    return repo


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "market_api_key", API_KEY)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def cache() -> InMemoryCacheStore:
    store = InMemoryCacheStore()
    app.dependency_overrides[get_cache_store] = lambda: store
    return store


def _use_repo(repo: MagicMock) -> None:
    app.dependency_overrides[get_listing_repo] = lambda: repo


class TestSearch:
    def test_returns_results_and_page(self, client: TestClient, cache: InMemoryCacheStore) -> None:
        _use_repo(_make_repo([_make_listing("1"), _make_listing("2")], total=61))

        response = client.get("/static/market/weapon", params={"network": "bsc"})

        assert response.status_code == 200
        data = response.json()
        assert data["idResults"] == ["1", "2"]
        assert data["results"][1]["weaponId"] == "2"
        assert data["page"] == {
            "curPage": 0,
            "curOffset": 0,
            "total": 61,
            "pageSize": 60,
            "numPages": 1,
        }

    def test_repeated_anonymous_search_is_cached(
        self, client: TestClient, cache: InMemoryCacheStore
    ) -> None:
        repo = _make_repo([_make_listing()], total=1)
        _use_repo(repo)

        first = client.get("/static/market/weapon", params={"element": "fire", "minStars": "2"})
        second = client.get("/static/market/weapon", params={"minStars": "2", "element": "fire"})

        assert first.status_code == second.status_code == 200
        assert second.content == first.content
        assert repo.find.await_count == 1
        assert len(cache) == 1

    def test_authenticated_search_bypasses_cache(
        self, client: TestClient, cache: InMemoryCacheStore
    ) -> None:
        repo = _make_repo([_make_listing()], total=1)
        _use_repo(repo)

        client.get("/static/market/weapon")
        response = client.get("/static/market/weapon", headers=AUTH)

        assert response.status_code == 200
        assert repo.find.await_count == 2

    def test_wrong_api_key_counts_as_anonymous(
        self, client: TestClient, cache: InMemoryCacheStore
    ) -> None:
        repo = _make_repo([_make_listing()], total=1)
        _use_repo(repo)

        client.get("/static/market/weapon")
        client.get("/static/market/weapon", headers={"X-API-Key": "guess"})

        assert repo.find.await_count == 1

    def test_non_ascii_api_key_counts_as_anonymous(
        self, client: TestClient, cache: InMemoryCacheStore
    ) -> None:
        repo = _make_repo([_make_listing()], total=1)
        _use_repo(repo)

        client.get("/static/market/weapon")
        response = client.get(
            "/static/market/weapon", headers=[(b"X-API-Key", "\xe9t\xe9".encode("latin-1"))]
        )

        assert response.status_code == 200
        assert repo.find.await_count == 1

    def test_works_without_cache(self, client: TestClient) -> None:
        app.dependency_overrides[get_cache_store] = lambda: None
        repo = _make_repo([_make_listing()], total=1)
        _use_repo(repo)

        client.get("/static/market/weapon")
        response = client.get("/static/market/weapon")

        assert response.status_code == 200
        assert repo.find.await_count == 2

    def test_persistence_failure_is_redacted(
        self, client: TestClient, cache: InMemoryCacheStore
    ) -> None:
        repo = _make_repo()
        repo.find = AsyncMock(side_effect=PersistenceError("find failed: relation does not exist"))
        _use_repo(repo)

        response = client.get("/static/market/weapon")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error."}


class TestUpsert:
    def _body(self, **overrides) -> dict:  # type: ignore[no-untyped-def, type-arg]
        body = {
            "price": 2.5,
            "weaponStars": 4,
            "weaponElement": "fire",
            "stat1Element": "str",
            "stat1Value": 150,
            "stat2Element": "dex",
            "stat2Value": 30,
            "timestamp": 1_700_000_000,
            "sellerAddress": "0xseller",
        }
        body.update(overrides)
        return body

    def test_adds_listing(self, client: TestClient) -> None:
        repo = _make_repo()
        _use_repo(repo)

        response = client.put("/market/weapon/bsc/42", json=self._body(), headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"added": True}
        stored: WeaponListing = repo.replace_or_insert.await_args.args[0]
        assert stored.natural_key == ("bsc", "42")
        assert stored.stat2_element == "dex"

    def test_missing_field_is_400(self, client: TestClient) -> None:
        repo = _make_repo()
        _use_repo(repo)

        response = client.put(
            "/market/weapon/bsc/42", json=self._body(sellerAddress=None), headers=AUTH
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid body. Must pass price")
        repo.replace_or_insert.assert_not_awaited()

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        _use_repo(_make_repo())
        response = client.put(
            "/market/weapon/bsc/42", json=self._body(weaponStars="many"), headers=AUTH
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_requires_authentication(self, client: TestClient) -> None:
        repo = _make_repo()
        _use_repo(repo)

        response = client.put("/market/weapon/bsc/42", json=self._body())

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated."}
        repo.replace_or_insert.assert_not_awaited()

    def test_non_ascii_api_key_is_rejected(self, client: TestClient) -> None:
        repo = _make_repo()
        _use_repo(repo)

        response = client.put(
            "/market/weapon/bsc/42",
            json=self._body(),
            headers=[(b"X-API-Key", "cl\xe9".encode("latin-1"))],
        )

        assert response.status_code == 401
        repo.replace_or_insert.assert_not_awaited()

    def test_does_not_touch_cache(self, client: TestClient) -> None:
        cache = MagicMock()
        app.dependency_overrides[get_cache_store] = lambda: cache
        _use_repo(_make_repo())

        client.put("/market/weapon/bsc/42", json=self._body(), headers=AUTH)

        assert cache.method_calls == []


class TestSell:
    def test_records_sale(self, client: TestClient) -> None:
        repo = _make_repo()
        repo.find_one = AsyncMock(return_value=_make_listing("42"))
        _use_repo(repo)

        response = client.get("/market/weapon/bsc/42/sell", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"sold": True}
        repo.insert_snapshot.assert_awaited_once()

    def test_unknown_listing_still_succeeds(self, client: TestClient) -> None:
        repo = _make_repo()
        _use_repo(repo)

        response = client.get("/market/weapon/bsc/404/sell", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"sold": True}
        repo.insert_snapshot.assert_not_awaited()


class TestDelete:
    def test_deletes_one(self, client: TestClient) -> None:
        repo = _make_repo()
        _use_repo(repo)

        response = client.delete("/market/weapon/bsc/1", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        repo.remove_one.assert_awaited_once_with("bsc", "1")

    def test_deletes_all_for_seller(self, client: TestClient) -> None:
        repo = _make_repo()
        _use_repo(repo)

        response = client.delete("/market/weapon/all/0xSeller", headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        repo.remove_many.assert_awaited_once_with(seller_address="0xSeller")
        repo.remove_one.assert_not_awaited()

    def test_persistence_failure_is_500(self, client: TestClient) -> None:
        repo = _make_repo()
        repo.remove_one = AsyncMock(side_effect=PersistenceError("remove_one failed"))
        _use_repo(repo)

        response = client.delete("/market/weapon/bsc/1", headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error."}


class TestHealth:
    def test_reports_database_and_cache(self, client: TestClient, cache: InMemoryCacheStore) -> None:
        session = MagicMock()
        session.execute = AsyncMock()
        session_cm = MagicMock()
        session_cm.__aenter__ = AsyncMock(return_value=session)
        session_cm.__aexit__ = AsyncMock(return_value=False)

        with patch(
            "weapon_market.api.routes.health.AsyncSessionLocal", return_value=session_cm
        ):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "cache": settings.cache_backend,
        }

    def test_reports_disabled_cache(self, client: TestClient) -> None:
        app.dependency_overrides[get_cache_store] = lambda: None
        with patch("weapon_market.api.routes.health.AsyncSessionLocal") as factory:
            factory.return_value.__aenter__ = AsyncMock(side_effect=OSError("refused"))
            factory.return_value.__aexit__ = AsyncMock(return_value=False)
            response = client.get("/health")

        data = response.json()
        assert data["cache"] == "disabled"
        assert data["status"] == "degraded"
