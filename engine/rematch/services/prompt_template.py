"""Prompt template catalogue — placeholder tokens, built-in defaults, validation.

The qualification prompt is a plain string with ``{token}`` placeholders. Buyer
tokens describe what the buyer is looking for; listing tokens describe the
property being evaluated. A usable template references at least one token from
each group so the model has something to compare.
"""

from __future__ import annotations

from dataclasses import dataclass, field

BUYER_PLACEHOLDERS: dict[str, str] = {
    "search_name": "{search_name}",
    "property_types": "{property_types}",
    "communities": "{communities}",
    "developers": "{developers}",
    "bedrooms": "{bedrooms}",
    "bathrooms": "{bathrooms}",
    "price_range": "{price_range}",
    "area_range": "{area_range}",
    "keywords": "{keywords}",
    "additional_notes": "{additional_notes}",
}

LISTING_PLACEHOLDERS: dict[str, str] = {
    "listing_type": "{listing_type}",
    "listing_transaction": "{listing_transaction}",
    "listing_location": "{listing_location}",
    "listing_developer": "{listing_developer}",
    "listing_bedrooms": "{listing_bedrooms}",
    "listing_bathrooms": "{listing_bathrooms}",
    "listing_price": "{listing_price}",
    "listing_area": "{listing_area}",
    "listing_furnishing": "{listing_furnishing}",
    "listing_is_off_plan": "{listing_is_off_plan}",
    "listing_is_urgent": "{listing_is_urgent}",
    "listing_description": "{listing_description}",
}

# Shown in the settings UI when no placeholder documentation row is stored
PLACEHOLDER_DOCS: dict[str, list[dict[str, str]]] = {
    "buyer_requirements": [
        {"name": "{search_name}", "description": "Name of the search criteria"},
        {"name": "{property_types}", "description": "Property types (apartment, villa, etc.)"},
        {"name": "{communities}", "description": "Target communities/locations"},
        {"name": "{developers}", "description": "Preferred developers"},
        {"name": "{bedrooms}", "description": "Number of bedrooms"},
        {"name": "{bathrooms}", "description": "Number of bathrooms"},
        {"name": "{price_range}", "description": "Price range in AED"},
        {"name": "{area_range}", "description": "Area range in sqft"},
        {"name": "{keywords}", "description": "Search keywords"},
        {"name": "{additional_notes}", "description": "Custom qualification criteria (ai_prompt field)"},
    ],
    "listing_data": [
        {"name": "{listing_type}", "description": "Property type"},
        {"name": "{listing_transaction}", "description": "Transaction type (sale/rent)"},
        {"name": "{listing_location}", "description": "Property location"},
        {"name": "{listing_developer}", "description": "Developer name"},
        {"name": "{listing_bedrooms}", "description": "Number of bedrooms"},
        {"name": "{listing_bathrooms}", "description": "Number of bathrooms"},
        {"name": "{listing_price}", "description": "Property price"},
        {"name": "{listing_area}", "description": "Area in sqft"},
        {"name": "{listing_furnishing}", "description": "Furnishing status"},
        {"name": "{listing_is_off_plan}", "description": "Is off-plan property"},
        {"name": "{listing_is_urgent}", "description": "Is urgent listing"},
        {"name": "{listing_description}", "description": "Full listing description (truncated to 500 chars)"},
    ],
}

DEFAULT_SYSTEM_PROMPT = """\
You are a real estate matching assistant. Analyze how well this property listing matches the buyer's requirements.

BUYER REQUIREMENTS:
- Search Name: {search_name}
- Property Types: {property_types}
- Target Communities: {communities}
- Preferred Developers: {developers}
- Bedrooms: {bedrooms}
- Bathrooms: {bathrooms}
- Price Range: {price_range}
- Area Range: {area_range}
- Keywords: {keywords}
{additional_notes}

PROPERTY LISTING:
- Type: {listing_type}
- Transaction: {listing_transaction}
- Location: {listing_location}
- Developer: {listing_developer}
- Bedrooms: {listing_bedrooms}
- Bathrooms: {listing_bathrooms}
- Price: {listing_price}
- Area: {listing_area}
- Furnishing: {listing_furnishing}
- Off-Plan: {listing_is_off_plan}
- Urgent: {listing_is_urgent}
- Description: {listing_description}

Evaluate the match and respond with ONLY a JSON object in this exact format:
{
  "score": <number 0-100>,
  "explanation": "<brief 1-2 sentence summary>",
  "highlights": ["<matching point 1>", "<matching point 2>"],
  "concerns": ["<potential issue 1>", "<potential issue 2>"]
}

Scoring guide:
- 90-100: Perfect match on all criteria
- 70-89: Good match, minor deviations
- 50-69: Partial match, some criteria not met
- 30-49: Weak match, significant mismatches
- 0-29: Poor match, most criteria not met

Be strict but fair. Only include real highlights and concerns."""

MISSING_BUYER_MESSAGE = "At least one buyer requirement placeholder"
MISSING_LISTING_MESSAGE = "At least one listing data placeholder"


@dataclass
class TemplateValidation:
    is_valid: bool
    missing_buyer: list[str] = field(default_factory=list)
    missing_listing: list[str] = field(default_factory=list)


def validate_template(template: str) -> TemplateValidation:
    """Check that *template* references at least one buyer and one listing token.

    Not every token is required; a template only has to give the model one
    side of each comparison.
    """
    has_buyer = any(token in template for token in BUYER_PLACEHOLDERS.values())
    has_listing = any(token in template for token in LISTING_PLACEHOLDERS.values())

    result = TemplateValidation(is_valid=has_buyer and has_listing)
    if not has_buyer:
        result.missing_buyer.append(MISSING_BUYER_MESSAGE)
    if not has_listing:
        result.missing_listing.append(MISSING_LISTING_MESSAGE)
    return result


def fill_placeholders(
    template: str,
    buyer_values: dict[str, str],
    listing_values: dict[str, str],
) -> str:
    """Replace every occurrence of each token with its value.

    Values are keyed by the full token, e.g. ``{"{bedrooms}": "2, 3"}``.
    Tokens without a value are left in place.
    """
    result = template
    for token, value in {**buyer_values, **listing_values}.items():
        result = result.replace(token, value)
    return result
