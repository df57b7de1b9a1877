"""Unit tests for the search cache signature."""
import json

import pytest

from weapon_market.application.cache_key import CacheKeyEncoder
from weapon_market.application.query_builder import QueryBuilder, SearchParams


@pytest.fixture()
def encoder() -> CacheKeyEncoder:
    return CacheKeyEncoder(prefix="mweapon-")


def _key(encoder: CacheKeyEncoder, **params: str) -> str:
    weapon_filter, pagination = QueryBuilder().build(SearchParams(**params))
    return encoder.encode(weapon_filter, pagination)


def test_key_is_prefixed(encoder: CacheKeyEncoder) -> None:
    assert _key(encoder).startswith("mweapon-")


def test_key_independent_of_argument_order(encoder: CacheKeyEncoder) -> None:
    a = _key(encoder, network="bsc", element="fire", min_price="3")
    b = _key(encoder, min_price="3", element="fire", network="bsc")
    assert a == b


def test_equivalent_raw_values_share_a_key(encoder: CacheKeyEncoder) -> None:
    assert _key(encoder) == _key(encoder, network="bsc", min_stars="1", max_stars="5")
    assert _key(encoder, page_size="100") == _key(encoder, page_size="60")


def test_key_serializes_unset_fields(encoder: CacheKeyEncoder) -> None:
    query, _, options = _key(encoder).removeprefix("mweapon-").partition("-{")
    decoded = json.loads(query)
    assert list(decoded) == [
        "network",
        "weaponElement",
        "sellerAddress",
        "buyerAddress",
        "weaponStars",
        "price",
    ]
    assert decoded["buyerAddress"] == {"$eq": None}
    assert decoded["price"] == {"gte": None, "lte": None}
    assert json.loads("{" + options) == {"skip": 0, "limit": 60, "sort": {"timestamp": -1}}


@pytest.mark.parametrize(
    "params",
    [
        {"network": "heco"},
        {"element": "fire"},
        {"seller_address": "0xseller"},
        {"buyer_address": "0xabc"},
        {"min_stars": "2"},
        {"max_stars": "4"},
        {"min_price": "1"},
        {"max_price": "1"},
        {"sort_by": "price"},
        {"sort_dir": "1"},
        {"page_size": "10"},
        {"page_num": "2"},
    ],
)
def test_each_field_changes_the_key(encoder: CacheKeyEncoder, params: dict) -> None:  # type: ignore[type-arg]
    assert _key(encoder, **params) != _key(encoder)


def test_min_and_max_price_do_not_collide(encoder: CacheKeyEncoder) -> None:
    assert _key(encoder, min_price="5") != _key(encoder, max_price="5")
