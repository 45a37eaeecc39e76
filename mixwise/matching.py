"""Score recipes against an inventory and sort them into completion groups.

Every call is a pure function of its arguments and never raises on odd
input: missing collections count as empty and rule strengths are compared
as given. Validating catalog and rule data is the loader's job, so bad data
shows up as silent under- or over-coverage rather than an error.

Substitution policy: for a required item that is neither owned nor a
staple, the *first* rule (in the order rules were supplied) whose strength
meets the threshold and whose target is owned or a staple covers it. This is
first-match, not best-match; it only changes which substitute is reported.
"""
import logging
from typing import Dict, Iterable, List, Optional, Set

from .classify import is_optional
from .schemas import MatchGroups, MatchResult, Recipe, SubstitutionRule
from .substitutions import index_rules

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.7


def _required_components(recipe: Recipe, staples: Set[int]) -> List:
    return [
        c for c in (recipe.components or [])
        if not is_optional(c) and c.item_id not in staples
    ]


def match_recipe(
    recipe: Recipe,
    owned: Set[int],
    staples: Set[int],
    rule_index: Dict[int, List[SubstitutionRule]],
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchResult:
    """Score a single recipe. Depends only on read-only shared inputs."""
    required = _required_components(recipe, staples)
    covered = 0
    missing_ids: List[int] = []
    missing_names: List[str] = []
    substituted: Dict[int, int] = {}

    for comp in required:
        item_id = comp.item_id
        if item_id in owned or item_id in staples:
            covered += 1
            continue

        for rule in rule_index.get(item_id, []):
            target = rule.to_item_id
            if rule.strength >= threshold and (target in owned or target in staples):
                covered += 1
                substituted[item_id] = target
                break
        else:
            missing_ids.append(item_id)
            missing_names.append(comp.name)

    total = len(required)
    return MatchResult(
        recipe=recipe,
        score=1.0 if total == 0 else covered / total,
        missing_required_item_ids=missing_ids,
        missing_required_item_names=missing_names,
        covered_by_substitution=substituted,
        required_total=total,
        required_covered=covered,
    )


def _rank(results: List[MatchResult]) -> List[MatchResult]:
    # Highest score first, then recipe name; sorted() is stable for exact ties.
    return sorted(results, key=lambda r: (-r.score, r.recipe.name or ""))


def compute_matches(
    recipes: Iterable[Recipe],
    owned_item_ids: Iterable[int],
    staple_item_ids: Iterable[int],
    rules: Iterable[SubstitutionRule],
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchGroups:
    """Match every recipe against the inventory.

    Returns ``MatchGroups`` where ``all`` holds every result, ``ready`` the
    recipes with nothing missing and ``almost_there`` those missing exactly
    one required item. Each group is ordered by descending score, then by
    recipe name.
    """
    owned = set(owned_item_ids or [])
    staples = set(staple_item_ids or [])
    rule_index = index_rules(rules or [])

    ready: List[MatchResult] = []
    almost_there: List[MatchResult] = []
    everything: List[MatchResult] = []

    for recipe in recipes or []:
        result = match_recipe(recipe, owned, staples, rule_index, threshold)
        everything.append(result)
        missing = len(result.missing_required_item_ids)
        if missing == 0:
            ready.append(result)
        elif missing == 1:
            almost_there.append(result)

    logger.debug(
        "matched %d recipes: %d ready, %d almost there",
        len(everything), len(ready), len(almost_there),
    )
    return MatchGroups(
        ready=_rank(ready),
        almost_there=_rank(almost_there),
        all=_rank(everything),
    )


def missing_for_recipe(
    recipe: Recipe,
    owned_item_ids: Iterable[int],
    staple_item_ids: Optional[Iterable[int]] = None,
) -> List[int]:
    """Required item ids of a recipe that are not directly owned.

    Substitutions are ignored: this is the shopping view of a recipe.
    """
    owned = set(owned_item_ids or [])
    staples = set(staple_item_ids or [])
    return [
        c.item_id for c in _required_components(recipe, staples)
        if c.item_id not in owned
    ]
