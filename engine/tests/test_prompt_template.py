"""Tests for the prompt template catalogue — validation and placeholder filling."""

from __future__ import annotations

from rematch.services.prompt_template import (
    BUYER_PLACEHOLDERS,
    DEFAULT_SYSTEM_PROMPT,
    LISTING_PLACEHOLDERS,
    PLACEHOLDER_DOCS,
    fill_placeholders,
    validate_template,
)


def test_default_prompt_is_valid():
    result = validate_template(DEFAULT_SYSTEM_PROMPT)
    assert result.is_valid
    assert result.missing_buyer == []
    assert result.missing_listing == []


def test_one_token_from_each_group_is_enough():
    result = validate_template("Buyer wants {bedrooms}; listing has {listing_bedrooms}.")
    assert result.is_valid


def test_missing_buyer_placeholders():
    result = validate_template("Listing: {listing_price}")
    assert not result.is_valid
    assert result.missing_buyer == ["At least one buyer requirement placeholder"]
    assert result.missing_listing == []


def test_missing_listing_placeholders():
    result = validate_template("Buyer: {price_range}")
    assert not result.is_valid
    assert result.missing_buyer == []
    assert result.missing_listing == ["At least one listing data placeholder"]


def test_missing_both_groups():
    result = validate_template("No placeholders at all")
    assert not result.is_valid
    assert result.missing_buyer and result.missing_listing


def test_unknown_tokens_do_not_count():
    result = validate_template("{buyer_name} vs {listing_name}")
    assert not result.is_valid


def test_placeholder_docs_cover_every_token():
    documented_buyer = {p["name"] for p in PLACEHOLDER_DOCS["buyer_requirements"]}
    documented_listing = {p["name"] for p in PLACEHOLDER_DOCS["listing_data"]}
    assert documented_buyer == set(BUYER_PLACEHOLDERS.values())
    assert documented_listing == set(LISTING_PLACEHOLDERS.values())


def test_fill_placeholders_replaces_every_occurrence():
    template = "{bedrooms} wanted, {bedrooms} again; listing has {listing_bedrooms}. {keywords}"
    result = fill_placeholders(
        template,
        {"{bedrooms}": "2"},
        {"{listing_bedrooms}": "3"},
    )
    assert result == "2 wanted, 2 again; listing has 3. {keywords}"


def test_fill_placeholders_treats_values_literally():
    result = fill_placeholders("{keywords} / {listing_price}", {"{keywords}": "$1 (sea view)"}, {})
    assert result == "$1 (sea view) / {listing_price}"
