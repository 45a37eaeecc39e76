import re
import unicodedata
from typing import Dict, Iterable, List

# Exact normalized matches only: variant -> canonical.
# Keys are already in normalized form; no value is itself a key.
NAME_ALIASES = {
    "lime cordial": "lime juice",
    "lime juice cordial": "lime juice",
    "lemon wedge": "lemon",
    "lime wedge": "lime",
    "castor sugar": "sugar",
    "caster sugar": "sugar",
    "granulated sugar": "sugar",
    "powdered sugar": "sugar",
    "confectioners sugar": "sugar",
    "simple syrup": "syrup",
    "sugar syrup": "syrup",
    "gomme syrup": "syrup",
    "agave syrup": "syrup",
    "angostura bitters": "bitters",
    "aromatic bitters": "bitters",
    "orange bitters": "bitters",
    "cointreau": "triple sec",
    "grand marnier": "triple sec",
    "curacao": "triple sec",
    "blue curacao": "triple sec",
    "gold tequila": "tequila",
    "silver tequila": "tequila",
    "blanco tequila": "tequila",
    "tequila blanco": "tequila",
    "reposado tequila": "tequila",
    "anejo tequila": "tequila",
    "white rum": "rum",
    "light rum": "rum",
    "gold rum": "rum",
    "dark rum": "rum",
    "spiced rum": "rum",
    "overproof rum": "rum",
    "cachaca": "rum",
}

FILLER_WORDS = ("fresh", "freshly", "squeezed", "of", "the", "a", "an")

_PARENTHETICAL = re.compile(r"\(.*?\)")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_FILLER = re.compile(r"\b(?:%s)\b" % "|".join(FILLER_WORDS))
_WHITESPACE = re.compile(r"\s+")


def _fold_accents(w: str) -> str:
    decomposed = unicodedata.normalize("NFKD", w)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def clean_ingredient_name(s: str) -> str:
    """Fold case, accents, punctuation, parentheticals and filler words.

    "Fresh Lime Juice (optional)" and "lime-juice" both become "lime juice".
    """
    if not s:
        return ""
    w = _fold_accents(str(s).lower())
    w = _PARENTHETICAL.sub(" ", w)
    w = _NON_ALNUM.sub(" ", w)
    w = _FILLER.sub(" ", w)
    return _WHITESPACE.sub(" ", w).strip()


def normalize_ingredient(s: str) -> str:
    """Reduce a free-text item name to its comparison key.

    The cleaned name is looked up in NAME_ALIASES so catalog variants collapse
    onto their canonical phrase. The function is idempotent.
    """
    w = clean_ingredient_name(s)
    return NAME_ALIASES.get(w, w)


def group_by_normalized_name(items: Iterable) -> Dict[str, List]:
    """Group catalog items whose names normalize to the same key.

    Groups appear in first-seen order and keep their members in input order.
    """
    groups: Dict[str, List] = {}
    for item in items or []:
        key = normalize_ingredient(item.name)
        groups.setdefault(key, []).append(item)
    return groups


def pick_representative(variants: List):
    """Return the variant to display for a group: the first non-staple one."""
    for v in variants:
        if not v.is_staple:
            return v
    return variants[0]


def sorted_variants(variants: List) -> List:
    return sorted(variants, key=lambda v: v.name)
