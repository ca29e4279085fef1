"""Tests for discovery.compression."""

import re

import pytest

from openapi_mcp_server.discovery.abbreviations import (
    DEFAULT_TABLES,
    AbbreviationTables,
)
from openapi_mcp_server.discovery.compression import (
    abbreviate,
    compress,
    elide_vowels,
    sanitize,
    short_hash,
    split_words,
    truncate_with_hash,
)

SLUG = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

SAMPLE_IDS = [
    "listPets",
    "getUserConfigurationById",
    "get_forecast_for_city",
    "GET /users/{id}/posts",
    "HTTPServerV2_getItem123abc",
    "café_naïve résumé",
    "___",
    "a" * 200,
    "retrieveTheCompleteOrganizationalRepository"
    "AdministrationConfigurationForEnvironment",
    "x" * 63 + "!",
]


@pytest.fixture
def fixture_tables():
    return AbbreviationTables.from_dicts({"fetch"}, {"widget": "wdg"})


class TestSanitize:
    def test_blank_input_falls_back(self):
        assert sanitize("", 64).fallback == "unnamed-tool"
        assert sanitize("   ", 64).fallback == "unnamed-tool"

    def test_symbols_only_falls_back_to_hash(self):
        result = sanitize("!!!", 64)
        assert result.fallback == "tool-" + short_hash("!!!", 8)

    def test_replaces_and_collapses(self):
        result = sanitize("--GET /users/{id}--", 64)
        assert result.name == "GET-users-id"
        assert result.fallback is None

    def test_tracks_original_length(self):
        assert sanitize("a" * 65, 64).original_was_long is True
        assert sanitize("a" * 64, 64).original_was_long is False


class TestSplitWords:
    def test_camel_case_and_digits(self):
        assert split_words("HTTPServerV2_getItem123abc") == [
            "HTTP",
            "Server",
            "V2",
            "get",
            "Item",
            "123",
            "abc",
        ]

    def test_hyphens_are_not_split(self):
        assert split_words("GET-users-id") == ["GET-users-id"]


class TestAbbreviate:
    def test_drops_common_words(self):
        assert abbreviate("get_forecast_for_city") == "forecast-city"

    def test_case_pattern_preserved(self):
        assert (
            abbreviate("CONFIGURATION_Identifier_information")
            == "CONFIG-Id-info"
        )

    def test_injected_tables(self, fixture_tables):
        assert abbreviate("fetchWidgetList", fixture_tables) == "Wdg-List"
        # "get" is only a stopword in the default tables
        assert abbreviate("getWidget", fixture_tables) == "get-Wdg"


class TestElideVowels:
    def test_untouched_when_short_enough(self):
        assert elide_vowels("widget-statement", 64) == "widget-statement"

    def test_long_parts_lose_vowels(self):
        assert elide_vowels("widget-statement-ab", 10) == "wdgt-sttmnt-ab"

    def test_abbreviations_are_kept(self):
        assert "config" in DEFAULT_TABLES.abbreviation_values
        assert elide_vowels("config-extras-more", 5) == "config-extrs-more"

    def test_never_shrinks_below_two_chars(self):
        assert elide_vowels("aeiouu", 1) == "aeiouu"


class TestTruncateWithHash:
    def test_collapses_without_hash(self):
        assert truncate_with_hash("a--b-", "orig", False, 64) == "a-b"

    def test_hash_forced_by_long_original(self):
        assert truncate_with_hash("pets", "orig", True, 64) == "pets-" + short_hash(
            "orig"
        )


class TestCompress:
    def test_empty_and_whitespace(self):
        assert compress("") == "unnamed-tool"
        assert compress("   ") == "unnamed-tool"

    def test_symbols_only(self):
        assert compress("!!!") == "tool-" + short_hash("!!!", 8)

    def test_camel_case_operation_id(self):
        assert compress("getUserConfigurationById") == "user-config-id"
        assert compress("listPets") == "list-pets"

    def test_snake_case_operation_id(self):
        assert compress("get_forecast_for_city") == "forecast-city"

    def test_method_and_path_source(self):
        assert compress("GET /users/{id}") == "get-users-id"

    def test_injected_tables(self, fixture_tables):
        assert compress("fetchWidgetList", tables=fixture_tables) == "wdg-list"

    def test_deterministic(self):
        for original in SAMPLE_IDS:
            assert compress(original) == compress(original)

    @pytest.mark.parametrize("max_length", [1, 3, 8, 16, 32, 64])
    def test_bound_and_charset(self, max_length):
        for original in SAMPLE_IDS + ["", "  ", "!!!"]:
            result = compress(original, max_length)
            assert 0 < len(result) <= max_length, (original, result)
            assert SLUG.match(result), (original, result)

    def test_long_original_gets_hash_even_after_shrinking(self):
        original = "the_" * 20 + "pets"
        assert len(original) > 64
        assert compress(original) == "pets-" + short_hash(original)

    def test_long_inputs_differing_at_the_end(self):
        a = "x" * 80 + "Alpha"
        b = "x" * 80 + "Omega"
        ca, cb = compress(a), compress(b)
        assert len(ca) == len(cb) == 64
        assert ca[:59] == cb[:59] == "x" * 59
        assert ca.endswith("-" + short_hash(a))
        assert cb.endswith("-" + short_hash(b))
        assert ca != cb

    def test_tiny_max_length_uses_hash(self):
        assert compress("listPets", 3) == short_hash("listPets")[:3]
        assert compress("", 5) == "unnam"

    def test_invalid_max_length(self):
        with pytest.raises(ValueError):
            compress("listPets", 0)
