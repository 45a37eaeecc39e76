# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `mixwise` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

from mixwise.matching import compute_matches, match_recipe, missing_for_recipe
from mixwise.schemas import Item, Recipe, RecipeComponent, SubstitutionRule
from mixwise.substitutions import build_rules_from_items

A, B, C, D = 1, 2, 3, 4
WATER, SPIRIT = 90, 91


def _recipe(rid, name, *components):
    comps = []
    for c in components:
        item_id, comp_name = c[0], c[1]
        hint = c[2] if len(c) > 2 else None
        comps.append(RecipeComponent(item_id=item_id, name=comp_name, is_optional_hint=hint))
    return Recipe(id=rid, name=name, components=comps)


def _rule(src, dst, strength=1.0):
    return SubstitutionRule(from_item_id=src, to_item_id=dst, strength=strength)


def _names(results):
    return [r.recipe.name for r in results]


# --- concrete scenarios -------------------------------------------------


def test_single_missing_item_only_in_all():
    recipe = _recipe(1, "Solo", (A, "Alpha"))
    groups = compute_matches([recipe], [], [], [])
    result = groups.all[0]
    assert result.missing_required_item_ids == [A]
    assert result.missing_required_item_names == ["Alpha"]
    assert result.score == 0
    assert groups.ready == []
    # one missing item: almost there
    assert _names(groups.almost_there) == ["Solo"]


def test_missing_two_items_appears_only_in_all():
    recipe = _recipe(1, "Duo", (A, "Alpha"), (B, "Beta"))
    groups = compute_matches([recipe], [], [], [])
    assert _names(groups.all) == ["Duo"]
    assert groups.ready == []
    assert groups.almost_there == []


def test_owning_the_item_makes_recipe_ready():
    recipe = _recipe(1, "Solo", (A, "Alpha"))
    groups = compute_matches([recipe], [A], [], [])
    assert groups.ready[0].score == 1.0
    assert _names(groups.ready) == ["Solo"]
    assert groups.almost_there == []


def test_substitution_covers_missing_item():
    recipe = _recipe(1, "Swap", (A, "Alpha"), (B, "Beta"))
    groups = compute_matches([recipe], [B, C], [], [_rule(A, C, 0.8)], threshold=0.7)
    result = groups.ready[0]
    assert result.covered_by_substitution == {A: C}
    assert result.score == 1.0
    assert result.missing_required_item_ids == []


def test_garnish_never_counts():
    recipe = _recipe(1, "Spirit and wedge", (SPIRIT, "Tequila"), (B, "Lime wedge"))
    groups = compute_matches([recipe], [SPIRIT], [], [])
    result = groups.ready[0]
    assert result.required_total == 1
    assert result.score == 1.0


def test_normalized_duplicates_cover_each_other():
    items = [Item(id=3, name="Tequila"), Item(id=6, name="Tequila Blanco")]
    rules = build_rules_from_items(items)
    needs_blanco = _recipe(1, "Needs Blanco", (6, "Tequila Blanco"))
    needs_plain = _recipe(2, "Needs Tequila", (3, "Tequila"))

    groups = compute_matches([needs_blanco, needs_plain], [3], [], rules)
    assert _names(groups.ready) == ["Needs Blanco", "Needs Tequila"]
    assert groups.ready[0].covered_by_substitution == {6: 3}

    groups = compute_matches([needs_blanco, needs_plain], [6], [], rules)
    assert _names(groups.ready) == ["Needs Blanco", "Needs Tequila"]
    assert groups.ready[1].covered_by_substitution == {3: 6}


# --- staples and optional components -------------------------------------


def test_zero_required_components_is_ready():
    garnish_only = _recipe(1, "Garnish only", (A, "Orange Peel"), (B, "Salt"))
    empty = Recipe(id=2, name="Empty", components=[])
    no_list = Recipe(id=3, name="No list", components=None)
    staple_only = _recipe(4, "Staple only", (WATER, "Water"))

    groups = compute_matches([garnish_only, empty, no_list, staple_only], [], [WATER], [])
    for result in groups.all:
        assert result.score == 1.0
        assert result.required_total == 0
    assert len(groups.ready) == 4


def test_staple_excluded_from_required():
    recipe = _recipe(1, "Highball", (A, "Vodka"), (WATER, "Water"))
    groups = compute_matches([recipe], [A], [WATER], [])
    assert groups.all[0].required_total == 1
    assert groups.all[0].score == 1.0


def test_staple_is_valid_substitution_target():
    recipe = _recipe(1, "Sour", (A, "Lemon Juice"))
    groups = compute_matches([recipe], [], [WATER], [_rule(A, WATER)])
    assert groups.all[0].covered_by_substitution == {A: WATER}
    assert _names(groups.ready) == ["Sour"]


def test_explicit_optional_hint_excluded():
    recipe = _recipe(1, "Hinted", (A, "Vodka"), (B, "Soda", True))
    groups = compute_matches([recipe], [A], [], [])
    assert groups.all[0].required_total == 1
    assert groups.all[0].missing_required_item_ids == []


# --- substitution policy -------------------------------------------------


def test_first_eligible_rule_wins():
    recipe = _recipe(1, "Pick", (A, "Alpha"))
    rules = [_rule(A, B, 0.75), _rule(A, C, 1.0)]
    groups = compute_matches([recipe], [B, C], [], rules)
    assert groups.all[0].covered_by_substitution == {A: B}


def test_rules_below_threshold_or_unowned_are_skipped():
    recipe = _recipe(1, "Pick", (A, "Alpha"))
    rules = [_rule(A, B, 0.5), _rule(A, D, 1.0), _rule(A, C, 0.9)]
    groups = compute_matches([recipe], [B, C], [], rules)
    assert groups.all[0].covered_by_substitution == {A: C}


def test_threshold_is_inclusive():
    recipe = _recipe(1, "Edge", (A, "Alpha"))
    groups = compute_matches([recipe], [B], [], [_rule(A, B, 0.7)], threshold=0.7)
    assert groups.all[0].covered_by_substitution == {A: B}


def test_out_of_range_strengths_compared_raw():
    recipe = _recipe(1, "Odd", (A, "Alpha"))
    never = compute_matches([recipe], [B], [], [_rule(A, B, -5)])
    always = compute_matches([recipe], [B], [], [_rule(A, B, 99)], threshold=50)
    assert never.all[0].missing_required_item_ids == [A]
    assert always.all[0].covered_by_substitution == {A: B}


def test_self_rule_is_inert():
    recipe = _recipe(1, "Self", (A, "Alpha"))
    groups = compute_matches([recipe], [], [], [_rule(A, A)])
    assert groups.all[0].missing_required_item_ids == [A]
    assert groups.all[0].covered_by_substitution == {}


def test_duplicate_rules_do_not_duplicate_output():
    recipe = _recipe(1, "Dup", (A, "Alpha"))
    rules = [_rule(A, B), _rule(A, B), _rule(A, B)]
    groups = compute_matches([recipe], [B], [], rules)
    assert groups.all[0].covered_by_substitution == {A: B}
    assert groups.all[0].required_covered == 1


def test_owned_item_does_not_use_substitution():
    recipe = _recipe(1, "Own", (A, "Alpha"))
    groups = compute_matches([recipe], [A, B], [], [_rule(A, B)])
    assert groups.all[0].covered_by_substitution == {}


# --- result shape and ordering -------------------------------------------


def test_missing_lists_follow_component_order():
    recipe = _recipe(1, "Order", (C, "Gamma"), (A, "Alpha"), (B, "Beta"), (D, "Delta"))
    result = compute_matches([recipe], [A], [], []).all[0]
    assert result.missing_required_item_ids == [C, B, D]
    assert result.missing_required_item_names == ["Gamma", "Beta", "Delta"]


def test_counts_add_up():
    recipes = [
        _recipe(1, "One", (A, "Alpha"), (B, "Beta"), (C, "Gamma")),
        _recipe(2, "Two", (A, "Alpha"), (D, "Delta", True)),
        _recipe(3, "Three", (C, "Gamma"), (WATER, "Water")),
    ]
    groups = compute_matches(recipes, [A], [WATER], [_rule(B, A)])
    for r in groups.all:
        assert r.required_covered + len(r.missing_required_item_ids) == r.required_total
        assert len(r.missing_required_item_ids) == len(r.missing_required_item_names)
        for required_id in r.covered_by_substitution:
            assert required_id not in r.missing_required_item_ids


def test_groups_are_subsets_and_disjoint():
    recipes = [
        _recipe(1, "Ready", (A, "Alpha")),
        _recipe(2, "Close", (A, "Alpha"), (B, "Beta")),
        _recipe(3, "Far", (B, "Beta"), (C, "Gamma")),
    ]
    groups = compute_matches(recipes, [A], [], [])
    all_ids = {r.recipe.id for r in groups.all}
    ready_ids = {r.recipe.id for r in groups.ready}
    almost_ids = {r.recipe.id for r in groups.almost_there}
    assert ready_ids <= all_ids
    assert almost_ids <= all_ids
    assert not ready_ids & almost_ids
    assert ready_ids == {1}
    assert almost_ids == {2}
    assert all_ids == {1, 2, 3}


def test_sorted_by_score_then_name():
    recipes = [
        _recipe(1, "zeta", (A, "Alpha")),
        _recipe(2, "Beta half", (A, "Alpha"), (B, "Beta")),
        _recipe(3, "alpha half", (A, "Alpha"), (C, "Gamma")),
        _recipe(4, "Zeta", (A, "Alpha")),
        _recipe(5, "none", (D, "Delta")),
    ]
    groups = compute_matches(recipes, [A], [], [])
    # uppercase sorts before lowercase
    assert _names(groups.all) == ["Zeta", "zeta", "Beta half", "alpha half", "none"]
    assert _names(groups.ready) == ["Zeta", "zeta"]
    assert _names(groups.almost_there) == ["Beta half", "alpha half", "none"]


def test_identical_inputs_give_equal_outputs():
    recipes = [
        _recipe(1, "One", (A, "Alpha"), (B, "Beta")),
        _recipe(2, "Two", (C, "Gamma")),
        _recipe(3, "Three", (A, "Alpha")),
    ]
    rules = [_rule(B, C, 0.9)]
    first = compute_matches(recipes, [A, C], [], rules)
    second = compute_matches(recipes, [A, C], [], rules)
    assert first == second
    assert _names(first.all) == _names(second.all)


def test_adding_owned_item_is_monotonic():
    recipes = [
        _recipe(1, "One", (A, "Alpha"), (B, "Beta")),
        _recipe(2, "Two", (C, "Gamma")),
        _recipe(3, "Three", (A, "Alpha"), (D, "Delta")),
        _recipe(4, "Four", (B, "Beta"), (C, "Gamma"), (D, "Delta")),
    ]
    rules = [_rule(D, B, 0.8)]
    owned = [A]
    before = compute_matches(recipes, owned, [], rules)
    for extra in (B, C, D):
        after = compute_matches(recipes, owned + [extra], [], rules)
        before_scores = {r.recipe.id: r.score for r in before.all}
        for r in after.all:
            assert r.score >= before_scores[r.recipe.id]
        after_ready = {r.recipe.id for r in after.ready}
        assert {r.recipe.id for r in before.ready} <= after_ready


def test_empty_and_none_inputs():
    assert compute_matches([], [], [], []).all == []
    groups = compute_matches(None, None, None, None)
    assert groups.all == [] and groups.ready == [] and groups.almost_there == []
    recipe = _recipe(1, "Solo", (A, "Alpha"))
    assert compute_matches([recipe], None, None, None).all[0].missing_required_item_ids == [A]


def test_match_recipe_directly():
    recipe = _recipe(1, "Solo", (A, "Alpha"), (B, "Beta"))
    result = match_recipe(recipe, {A}, set(), {})
    assert result.score == 0.5
    assert result.required_total == 2
    assert result.required_covered == 1


def test_missing_for_recipe_ignores_substitutions():
    recipe = _recipe(1, "Shop", (A, "Alpha"), (B, "Beta"), (C, "Cherry"), (WATER, "Water"))
    assert missing_for_recipe(recipe, [A], [WATER]) == [B]
    assert missing_for_recipe(recipe, [A, B]) == [WATER]
