"""Name-based heuristics over catalog items and recipe components.

Neither function sees structured role metadata; both infer intent from the
name alone and can be wrong for names like "Cherry Brandy".
"""
from .normalize import clean_ingredient_name

# Substrings of a normalized component name that mark it as decorative.
OPTIONAL_KEYWORDS = (
    "garnish",
    "twist",
    "wedge",
    "slice",
    "wheel",
    "peel",
    "rim",
    "salt",
    "sugar",
    "olive",
    "cherry",
    "mint leaf",
    "mint leaves",
    "sprig",
    "zest",
)

# Checked in order; the first matching category wins.
CATEGORY_KEYWORDS = (
    ("Spirit", ("vodka", "gin", "rum", "tequila", "whiskey", "bourbon", "brandy")),
    ("Liqueur", ("liqueur", "schnapps", "triple sec", "vermouth")),
    ("Mixer", ("juice", "syrup", "soda", "water")),
    ("Bitters", ("bitters",)),
    ("Garnish", ("garnish", "peel", "wedge", "slice")),
)
DEFAULT_CATEGORY = "Mixer"


def is_optional(component) -> bool:
    """Return True when a recipe component should not count toward completion.

    An explicit ``is_optional_hint=True`` wins. Anything else (False or
    missing) falls back to the keyword heuristic on the cleaned name, before
    alias lookup (so "Lime Wedge", aliased to "lime", still counts).
    """
    if getattr(component, "is_optional_hint", None) is True:
        return True
    cleaned = clean_ingredient_name(getattr(component, "name", ""))
    return any(kw in cleaned for kw in OPTIONAL_KEYWORDS)


def categorize_item(name: str) -> str:
    n = (name or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(kw in n for kw in keywords):
            return category
    return DEFAULT_CATEGORY
