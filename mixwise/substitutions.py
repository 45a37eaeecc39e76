from typing import Dict, Iterable, List

from .normalize import group_by_normalized_name
from .schemas import SubstitutionRule


def build_rules_from_items(items: Iterable) -> List[SubstitutionRule]:
    """Let every item substitute for every other item sharing its normalized name.

    Bridges catalog duplicates such as "Tequila" and "Tequila Blanco". A group
    of n items yields n * (n - 1) rules of strength 1.0 and never a
    self-rule. Rule generation is quadratic in group size, which assumes
    duplicate-name clusters stay small.
    """
    rules: List[SubstitutionRule] = []
    for group in group_by_normalized_name(items).values():
        if len(group) < 2:
            continue
        for i, src in enumerate(group):
            for j, dst in enumerate(group):
                if i == j:
                    continue
                rules.append(
                    SubstitutionRule(from_item_id=src.id, to_item_id=dst.id, strength=1.0)
                )
    return rules


def index_rules(rules: Iterable[SubstitutionRule]) -> Dict[int, List[SubstitutionRule]]:
    """Map each from_item_id to its candidate rules, keeping input order."""
    index: Dict[int, List[SubstitutionRule]] = {}
    for rule in rules or []:
        index.setdefault(rule.from_item_id, []).append(rule)
    return index
