# =============================================================================
# tests/test_sanitize.py - Request Sanitizer Tests
# =============================================================================
# This module contains tests for the pure helpers in lib.sanitize:
# - operator key stripping (nested, bracket notation, replacement)
# - HTML escaping
# - repeated query key collapsing
# - JSON cookie decoding
# =============================================================================

import pytest

from lib.sanitize import (
    collapse_repeated,
    decode_json_cookie,
    escape_html,
    escape_query,
    is_prohibited_key,
    strip_operator_keys,
    strip_operator_query,
)


# =============================================================================
# Operator Keys
# =============================================================================

class TestIsProhibitedKey:

    @pytest.mark.parametrize("key", ["$gt", "$where", "profile.role", "a.b.c", "price[$gt]", "user[profile.role]"])
    def test_prohibited(self, key):
        assert is_prohibited_key(key)

    @pytest.mark.parametrize("key", ["email", "averageCost", "price[lte]", "cost$", "tags[]"])
    def test_allowed(self, key):
        assert not is_prohibited_key(key)


class TestStripOperatorKeys:

    def test_nested_dicts_and_lists(self):
        body = {
            "email": {"$gt": ""},
            "careers": [{"$ne": None, "name": "Web Development"}],
            "location.city": "Boston",
        }

        result = strip_operator_keys(body)

        assert result == {"email": {}, "careers": [{"name": "Web Development"}]}

    def test_sanitizes_in_place(self):
        body = {"$where": "sleep(1000)"}

        assert strip_operator_keys(body) is body
        assert body == {}

    def test_replace_with(self):
        result = strip_operator_keys({"$where": "1", "a.b": 2}, replace_with="_")

        assert result == {"_where": "1", "a_b": 2}

    @pytest.mark.parametrize("value", ["text", 42, None, True])
    def test_scalars_pass_through(self, value):
        assert strip_operator_keys(value) == value

    def test_query_items(self):
        items = [("name", "x"), ("price[$gt]", "5"), ("$where", "1")]

        assert strip_operator_query(items) == [("name", "x")]
        assert strip_operator_query(items, replace_with="_") == [
            ("name", "x"),
            ("price[_gt]", "5"),
            ("_where", "1"),
        ]


# =============================================================================
# HTML Escaping
# =============================================================================

class TestEscapeHtml:

    def test_nested_strings(self):
        body = {"title": "<b>Bold</b>", "tags": ["R&D", {"note": "<i>"}], "rating": 9}

        assert escape_html(body) == {
            "title": "&lt;b&gt;Bold&lt;/b&gt;",
            "tags": ["R&amp;D", {"note": "&lt;i&gt;"}],
            "rating": 9,
        }

    def test_quotes_untouched(self):
        assert escape_html('say "hi"') == 'say "hi"'

    def test_query(self):
        assert escape_query([("q", "<script>")]) == [("q", "&lt;script&gt;")]


# =============================================================================
# Parameter Pollution
# =============================================================================

class TestCollapseRepeated:

    def test_last_value_wins(self):
        collapsed, polluted = collapse_repeated([("sort", "name"), ("page", "1"), ("sort", "-averageCost")])

        assert collapsed == [("sort", "-averageCost"), ("page", "1")]
        assert polluted == {"sort": ["name", "-averageCost"]}

    def test_no_repeats(self):
        items = [("a", "1"), ("b", "2")]

        assert collapse_repeated(items) == (items, {})

    def test_whitelist(self):
        collapsed, polluted = collapse_repeated(
            [("careers", "UI/UX"), ("careers", "Business")],
            whitelist={"careers"},
        )

        assert collapsed == [("careers", "UI/UX"), ("careers", "Business")]
        assert polluted == {}


# =============================================================================
# Cookies
# =============================================================================

class TestDecodeJsonCookie:

    def test_json_prefix(self):
        assert decode_json_cookie('j:{"a": [1, 2]}') == {"a": [1, 2]}

    def test_plain_value(self):
        assert decode_json_cookie("abc") == "abc"

    def test_invalid_json_kept(self):
        assert decode_json_cookie("j:{oops") == "j:{oops"
