from listing_aggregator.catalog import (
    DEFAULT_SOURCES,
    all_sources,
    canonical_city,
    get_source,
    match_city_key,
    normalize_location_query,
    resolve,
    search_location,
)
from listing_aggregator.schema import ListingCategory
from listing_aggregator.sources.base import SourceKind


def _ids(sources):
    return [s.id for s in sources]


def test_normalize_location_query_strips_state_and_decodes():
    assert normalize_location_query("Miami%20Beach,%20FL") == "miami beach"
    assert normalize_location_query("  Miami   Beach , fl ") == "miami beach"
    assert normalize_location_query("Houston TX") == "houston"
    assert normalize_location_query("new york, new york") == "new york"
    assert normalize_location_query("Chicago, Illinois 60606") == "chicago"
    assert normalize_location_query("san+antonio") == "san antonio"


def test_normalize_location_query_keeps_bare_state_and_empty():
    assert normalize_location_query("Texas") == "texas"
    assert normalize_location_query("") == ""
    assert normalize_location_query(None) == ""


def test_two_word_sub_locality_wins_over_contained_city():
    beach = resolve("Miami Beach, FL")
    miami = resolve("Miami, FL")
    assert "commercial_miami_beach" in _ids(beach)
    assert "commercial_miami_beach" not in _ids(miami)
    assert canonical_city("Miami Beach, FL") == "miami beach"
    assert canonical_city("miami") == "miami"


def test_substring_match_prefers_longest_key():
    # "new york city" and "new york" both occur; the longer key wins.
    assert match_city_key("apartments in new york city") == "new york city"
    assert match_city_key("lofts near miami beach boardwalk") == "miami beach"


def test_short_alias_only_matches_whole_words():
    # "dallas" contains "la" but must not route to Los Angeles.
    assert match_city_key("dallas") is None
    assert _ids(resolve("dallas")) == list(DEFAULT_SOURCES)
    assert canonical_city("LA") == "los angeles"
    assert canonical_city("sf") == "san francisco"
    assert canonical_city("Vegas, NV") == "las vegas"


def test_unknown_location_falls_back_to_default_sources():
    assert _ids(resolve("Boise, ID")) == list(DEFAULT_SOURCES)
    assert _ids(resolve(None)) == list(DEFAULT_SOURCES)


def test_resolve_is_deterministic_and_unique():
    first = resolve("Miami")
    second = resolve("miami")
    assert first == second
    assert len(_ids(first)) == len(set(_ids(first)))


def test_city_entries_keep_declared_load_order():
    ids = _ids(resolve("Miami"))
    assert ids == [
        "commercial_combined_2",
        "commercial_miami_sale",
        "aggregator_miami_sale",
        "aggregator_miami_lease",
        "residential_miami_sale",
        "residential_miami_lease",
    ]


def test_listing_category_narrows_sources():
    sale = _ids(resolve("Miami", ListingCategory.SALE))
    lease = _ids(resolve("Miami", ListingCategory.LEASE))
    assert "aggregator_miami_lease" not in sale
    assert "residential_miami_lease" not in sale
    assert "commercial_combined_2" in sale
    assert "aggregator_miami_sale" not in lease
    assert "residential_miami_lease" in lease
    assert _ids(resolve("Miami", ListingCategory.AUCTION)) == _ids(resolve("Miami"))


def test_search_location_expands_aliases():
    assert search_location("NYC") == "new york"
    assert search_location("philly, pa") == "philadelphia"
    assert search_location("Miami") == "miami"


def test_source_kinds_are_tagged_in_catalog():
    assert get_source("aggregator_las_vegas_sale").kind is SourceKind.AGGREGATOR_SALE
    assert get_source("aggregator_las_vegas_lease").kind is SourceKind.AGGREGATOR_LEASE
    assert get_source("residential_miami_sale").kind is SourceKind.RESIDENTIAL
    assert get_source("commercial_combined").kind is SourceKind.COMMERCIAL_EXPORT
    ids = [s.id for s in all_sources()]
    assert ids == sorted(ids)
