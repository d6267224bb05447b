from datetime import timedelta

from wineo.modules.listings.mapping import make_excerpt
from wineo.modules.listings.search import (
    ListingSearchState,
    attribute_matches,
    build_listing_search_string,
    featured_listings,
    filter_listings,
    latest_listings,
    listing_base_path,
    paginate,
    parse_listing_search_params,
    search_listings,
)


def test_parse_reads_query_and_keeps_path_category():
    state = parse_listing_search_params(
        "buy",
        {"priceMin": "10", "priceMax": ["500", "900"], "region": "kakheti", "sort": "price_asc", "page": "2", "q": "press", "category": "ignored"},
        category_slug="barrels",
    )
    assert state == ListingSearchState(
        type="buy", category_slug="barrels", price_min="10", price_max="500",
        region="kakheti", sort="price_asc", page="2", keyword="press",
    )


def test_parse_without_args():
    assert parse_listing_search_params("rent", None) == ListingSearchState(type="rent")


def test_parse_drops_empty_values():
    state = parse_listing_search_params("buy", {"priceMin": "", "q": ""})
    assert state.price_min is None
    assert state.keyword is None


def test_base_path():
    assert listing_base_path("buy") == "/buy"
    assert listing_base_path("rent", "pumps") == "/rent/pumps"


def test_search_string():
    assert build_listing_search_string() == ""
    assert build_listing_search_string(price_min=0, region="kakheti", page=1) == "?priceMin=0&region=kakheti"
    assert build_listing_search_string(sort="newest", page="3", keyword="oak barrel") == "?sort=newest&page=3&q=oak+barrel"


def test_excerpt_truncates_long_descriptions():
    assert make_excerpt("short") == "short"
    long = "x" * 149 + " " + "y" * 20
    assert make_excerpt(long) == "x" * 149 + "…"


def test_filter_by_keyword_region_and_price(make_listing):
    a = make_listing(id="a", title="Oak barrel", price=600, location="Kutaisi, Imereti")
    b = make_listing(id="b", title="Press", description="hydraulic oak-free press", price=2400, location="Telavi, Kakheti", region_slug="kakheti")
    c = make_listing(id="c", title="Pump", price=80, location="Gori, Kartli")

    assert [l.id for l in filter_listings([a, b, c], keyword="OAK")] == ["a", "b"]
    assert [l.id for l in filter_listings([a, b, c], region_slug="kakheti")] == ["b"]
    assert [l.id for l in filter_listings([a, b, c], region_slug="imereti")] == ["a"]
    assert [l.id for l in filter_listings([a, b, c], price_min=80, price_max=600)] == ["a", "c"]


def test_paginate():
    items = list(range(25))
    assert paginate(items, 1, 10) == (list(range(10)), 25)
    assert paginate(items, 3, 10) == ([20, 21, 22, 23, 24], 25)
    assert paginate(items, 0, 10)[0] == list(range(10))
    assert paginate([], 1, 10) == ([], 0)


def test_search_filters_ranks_and_pages(make_listing, now):
    listings = [
        make_listing(id=f"n{i}", title="barrel", price=i, created_at=f"2024-01-{i + 1:02d}")
        for i in range(5)
    ]
    listings.append(make_listing(id="promo", title="barrel", price=99, promotion_type="featured", promotion_expires_at=now + timedelta(days=1)))
    listings.append(make_listing(id="other", title="pump"))

    state = ListingSearchState(type="buy", keyword="barrel", sort="price_asc", page="1")
    items, total = search_listings(listings, state, now=now, limit=3)
    assert total == 6
    assert [l.id for l in items] == ["promo", "n0", "n1"]

    state.page = "2"
    items, _ = search_listings(listings, state, now=now, limit=3)
    assert [l.id for l in items] == ["n2", "n3", "n4"]


def test_search_ignores_bad_numbers(make_listing, now):
    state = ListingSearchState(type="buy", price_min="abc", page="x")
    items, total = search_listings([make_listing()], state, now=now)
    assert total == 1


def test_search_empty(now):
    assert search_listings([], ListingSearchState(type="buy"), now=now) == ([], 0)


def test_latest_and_featured(make_listing, now):
    old = make_listing(id="old", created_at="2024-01-01")
    new = make_listing(id="new", created_at="2024-02-01")
    promo = make_listing(id="promo", created_at="2023-01-01", promotion_type="homepageTop", promotion_expires_at=now + timedelta(hours=2))
    expired = make_listing(id="expired", promotion_type="featured", promotion_expires_at=now - timedelta(hours=2))

    items, total = latest_listings([old, new, promo, expired], limit=2, offset=0, now=now)
    assert total == 4
    assert [l.id for l in items] == ["promo", "new"]

    assert [l.id for l in featured_listings([old, promo, expired], now=now)] == ["promo"]
    assert latest_listings([], now=now) == ([], 0)


def test_price_bounds_exclude_unpriced_listings(make_listing):
    priced = make_listing(id="priced", price=50)
    unpriced = make_listing(id="unpriced", price=None)
    garbage = make_listing(id="garbage", price="ask")

    listings = [priced, unpriced, garbage]
    assert [l.id for l in filter_listings(listings, price_max=100)] == ["priced"]
    assert [l.id for l in filter_listings(listings, price_min=0)] == ["priced"]
    assert [l.id for l in filter_listings(listings)] == ["priced", "unpriced", "garbage"]


def test_parse_collects_repeated_attribute_params():
    state = parse_listing_search_params(
        "buy",
        {"attr_capacity": ["0-100", "200-300"], "attr_electric": "1", "attr_wood": [""], "attr_": ["x"]},
    )
    assert state.attributes == {"capacity": ["0-100", "200-300"], "electric": ["1"]}
    assert state.to_dict()["attributes"] == state.attributes


def test_search_string_repeats_attribute_params():
    s = build_listing_search_string(sort="newest", attributes={"capacity": ["0-100", "200-300"], "wood": "oak", "empty": []})
    assert s == "?sort=newest&attr_capacity=0-100&attr_capacity=200-300&attr_wood=oak"


def test_attribute_value_matching():
    assert attribute_matches(True, "1")
    assert attribute_matches(True, "true")
    assert attribute_matches(False, "0")
    assert not attribute_matches(False, "1")
    assert attribute_matches(200, "100-300")
    assert attribute_matches("50", "0-100")
    assert attribute_matches(500, "300-")
    assert not attribute_matches(500, "0-100")
    assert not attribute_matches("oak", "0-100")
    assert attribute_matches(225, "225")
    assert attribute_matches("225.0", "225")
    assert attribute_matches("Oak", "oak")
    assert attribute_matches(["steel", "aluminium"], "Steel")
    assert not attribute_matches(None, "oak")


def test_filter_by_attributes(make_listing):
    press = make_listing(id="press", attributes={"capacity": 200, "electric": True})
    crusher = make_listing(id="crusher", attributes={"capacity": "50", "material": ["steel"]})
    pump = make_listing(id="pump")
    listings = [press, crusher, pump]

    # any value within one filter
    assert [l.id for l in filter_listings(listings, attributes={"capacity": ["0-100", "150-250"]})] == ["press", "crusher"]
    # every filter across them; a missing attribute never matches
    assert [l.id for l in filter_listings(listings, attributes={"capacity": ["0-300"], "material": ["steel"]})] == ["crusher"]
    assert [l.id for l in filter_listings(listings, attributes={"electric": ["1"]})] == ["press"]
    assert [l.id for l in filter_listings(listings, attributes={"capacity": []})] == ["press", "crusher", "pump"]


def test_search_applies_attribute_state(make_listing, now):
    a = make_listing(id="a", attributes={"wood": "oak"})
    b = make_listing(id="b", attributes={"wood": "chestnut"})
    state = parse_listing_search_params("buy", {"attr_wood": ["OAK"]})
    items, total = search_listings([a, b], state, now=now)
    assert [l.id for l in items] == ["a"]
    assert total == 1
