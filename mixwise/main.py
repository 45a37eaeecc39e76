import argparse
import logging
import sys

from .catalog import load_catalog, resolve_item_ids, staple_item_ids
from .config import DEFAULT_SETTINGS
from .logging_utils import init_logging
from .matching import compute_matches
from .substitutions import build_rules_from_items

logger = logging.getLogger(__name__)


def _pct(score):
    return f"{round(score * 100)}%"


def run(argv=None):
    """Parse arguments, print the summary and return the match groups."""
    parser = argparse.ArgumentParser(description="Show what you can mix with what you own.")
    parser.add_argument("owned", nargs="*", help="names of items you own")
    parser.add_argument("--catalog", default=str(DEFAULT_SETTINGS.catalog_path))
    parser.add_argument(
        "--threshold", type=float, default=DEFAULT_SETTINGS.substitution_threshold
    )
    args = parser.parse_args(argv)

    init_logging(DEFAULT_SETTINGS.log_level)
    catalog = load_catalog(args.catalog)
    owned, unknown = resolve_item_ids(catalog.items, args.owned)
    for name in unknown:
        logger.warning("unknown item %r ignored", name)

    groups = compute_matches(
        catalog.recipes,
        owned,
        staple_item_ids(catalog.items),
        build_rules_from_items(catalog.items),
        threshold=args.threshold,
    )

    print(f"Loaded {len(catalog.recipes)} recipe(s), {len(catalog.items)} item(s).")
    print(f"Ready to mix ({len(groups.ready)}):")
    for r in groups.ready:
        subs = ", ".join(f"{k}->{v}" for k, v in r.covered_by_substitution.items())
        print(f"- {r.recipe.name}" + (f" (substituted {subs})" if subs else ""))
    print(f"One away ({len(groups.almost_there)}):")
    for r in groups.almost_there:
        print(f"- {r.recipe.name} [{_pct(r.score)}] needs {r.missing_required_item_names[0]}")
    return groups


def main(argv=None):
    run(argv)
    return 0


if __name__ == "__main__":
    sys.exit(main())
