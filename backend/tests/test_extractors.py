"""
Tests for listing field extraction.
"""

import pytest

from hotel_scraper.base import FieldRule, HotelRecord
from hotel_scraper.utils.extractors import extract_field, extract_listing, group_rules, select_text

from conftest import make_card


class TestExtractListing:
    """Test extracting a record from one property card."""

    def test_primary_selectors(self, soup_card):
        card = soup_card(make_card("Hotel Lisboa", "Lisbon, Portugal", "US$1,200"))

        assert extract_listing(card) == HotelRecord("Hotel Lisboa", "Lisbon, Portugal", "1200")

    def test_fallback_selectors(self, soup_card):
        card = soup_card(make_card("Casa do Porto", "Porto", "US$89", fallback=True))

        assert extract_listing(card) == HotelRecord("Casa do Porto", "Porto", "89")

    def test_primary_wins_over_fallback(self, soup_card):
        card = soup_card(
            '<div data-testid="property-card">'
            '<div data-testid="title">Primary Name</div>'
            '<div class="a23c043802">Fallback Name</div>'
            '</div>'
        )

        assert extract_listing(card).name == "Primary Name"

    def test_blank_primary_falls_through(self, soup_card):
        card = soup_card(
            '<div data-testid="property-card">'
            '<div data-testid="title">   </div>'
            '<div class="a23c043802">Fallback Name</div>'
            '</div>'
        )

        assert extract_listing(card).name == "Fallback Name"

    def test_missing_fields_are_empty(self, soup_card):
        card = soup_card(make_card("Only A Name"))

        hotel = extract_listing(card)
        assert hotel == HotelRecord("Only A Name", "", "")

    def test_missing_name_does_not_raise(self, soup_card):
        card = soup_card(make_card(location="Faro", price="US$50"))

        hotel = extract_listing(card)
        assert hotel.name == ""
        assert hotel.location == "Faro"
        assert hotel.price == "50"

    def test_nested_markup_whitespace_collapsed(self, soup_card):
        card = soup_card(
            '<div data-testid="property-card">'
            '<div data-testid="title">\n  Grand <b>Hotel</b>\n  Central </div>'
            '</div>'
        )

        assert extract_listing(card).name == "Grand Hotel Central"

    def test_custom_rules(self, soup_card):
        card = soup_card(
            '<div data-testid="property-card">'
            '<h3 class="hotel-name">Custom</h3><span class="cost">€ 1,000</span>'
            '</div>'
        )
        rules = [FieldRule('name', 'h3.hotel-name'), FieldRule('price', 'span.cost')]

        assert extract_listing(card, rules=rules) == HotelRecord("Custom", "", "1000")

    def test_site_without_currency_prefixes(self, soup_card):
        card = soup_card(make_card("Hotel Lisboa", "Lisbon", "US$1,200"))

        assert extract_listing(card, currency_prefixes=()).price == "US$1200"


class TestRuleHelpers:
    """Test rule grouping and selector lookup."""

    def test_group_rules_preserves_order(self):
        rules = [FieldRule('name', 'a'), FieldRule('price', 'p'), FieldRule('name', 'b')]

        assert group_rules(rules) == {'name': ['a', 'b'], 'price': ['p']}

    def test_group_rules_rejects_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown field"):
            group_rules([FieldRule('stars', 'span.stars')])

    def test_select_text_concatenates_matches(self, soup_card):
        card = soup_card('<div data-testid="property-card"><i>a</i><i>b</i></div>')

        assert select_text(card, 'i') == "ab"

    def test_extract_field_no_match(self, soup_card):
        card = soup_card(make_card("Name"))

        assert extract_field(card, ['span.nothing', 'div.nothing']) == ""
