"""Free-text product type classification and color detection."""

import re
from typing import Optional

DEFAULT_CATEGORY = "shirt"

# Ordered (pattern, category) rules; first match wins, so order is significant.
CATEGORY_RULES: list[tuple[re.Pattern, str]] = [
    # Tops
    (re.compile(r"\b(t-shirt|tee|tank top|camisole|crop top|tube top)\b"), "shirt"),
    (re.compile(r"\b(blouse|button-up|button down)\b"), "shirt"),
    (re.compile(r"\b(sweater|pullover|knit|cardigan)\b"), "sweater"),
    (re.compile(r"\b(hoodie|sweatshirt)\b"), "hoodie"),

    # Outerwear
    (re.compile(r"\b(jacket|coat|blazer|parka|windbreaker|bomber)\b"), "jacket"),

    # Bottoms
    (re.compile(r"\b(jeans|denim)\b"), "jeans"),
    (re.compile(r"\b(pants|trousers|slacks|chinos|khakis)\b"), "pants"),
    (re.compile(r"\b(shorts|bermuda)\b"), "shorts"),
    (re.compile(r"\b(skirt|mini|midi|maxi)\b"), "skirt"),
    (re.compile(r"\b(leggings|tights)\b"), "leggings"),

    # Dresses & one-pieces
    (re.compile(r"\b(dress|gown|frock|sundress)\b"), "dress"),
    (re.compile(r"\b(jumpsuit|romper|playsuit|overalls)\b"), "jumpsuit"),

    # Footwear
    (re.compile(r"\b(sneakers|trainers|kicks)\b"), "sneakers"),
    (re.compile(r"\b(boots|ankle boot|knee boot)\b"), "boots"),
    (re.compile(r"\b(heels|pumps|stilettos)\b"), "heels"),
    (re.compile(r"\b(sandals|flip-flops|slides)\b"), "sandals"),
    (re.compile(r"\b(loafers|oxfords|dress shoes)\b"), "dress-shoes"),
    (re.compile(r"\b(shoes|footwear)\b"), "shoes"),

    # Accessories
    (re.compile(r"\b(hat|cap|beanie|fedora)\b"), "hat"),
    (re.compile(r"\b(bag|purse|handbag|tote|clutch|backpack)\b"), "bag"),
    (re.compile(r"\b(belt|sash)\b"), "belt"),
    (re.compile(r"\b(scarf|bandana)\b"), "scarf"),
    (re.compile(r"\b(sunglasses|glasses|eyewear)\b"), "sunglasses"),
    (re.compile(r"\b(jewelry|necklace|bracelet|earrings|ring)\b"), "jewelry"),
    (re.compile(r"\b(watch)\b"), "watch"),

    # Activewear
    (re.compile(r"\b(sports bra|athletic)\b"), "activewear"),
    (re.compile(r"\b(yoga pants|gym|workout)\b"), "activewear"),
]

COLOR_PALETTE = (
    "black", "white", "red", "blue", "green", "yellow", "pink", "purple",
    "orange", "brown", "gray", "grey", "beige", "navy", "teal", "burgundy",
    "maroon", "olive", "tan", "cream", "ivory",
)

_COLOR_RE = re.compile(r"\b(" + "|".join(COLOR_PALETTE) + r")\b")


def categorize(text: Optional[str]) -> str:
    """
    Map free text (usually name + description) to a product type.

    Returns:
        Category tag, ``DEFAULT_CATEGORY`` if no rule matches
    """
    lower = (text or "").lower()
    for pattern, category in CATEGORY_RULES:
        if pattern.search(lower):
            return category
    return DEFAULT_CATEGORY


def detect_color(text: Optional[str]) -> Optional[str]:
    """Return the first palette color mentioned as a whole word."""
    match = _COLOR_RE.search((text or "").lower())
    return match.group(1) if match else None
