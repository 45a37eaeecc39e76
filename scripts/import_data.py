import sys
from pathlib import Path

from mixwise.catalog import load_catalog
from mixwise.config import DEFAULT_SETTINGS
from mixwise.db import SessionLocal, init_db
from mixwise.crud import import_catalog
from mixwise.logging_utils import get_logger

logger = get_logger("import_data")


def main():
    init_db()
    p = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SETTINGS.catalog_path
    if not p.exists():
        logger.error("%s not found", p)
        return
    catalog = load_catalog(p)
    db = SessionLocal()
    try:
        items_added, recipes_added = import_catalog(db, catalog)
    finally:
        db.close()
    logger.info("imported %d items and %d recipes from %s", items_added, recipes_added, p)


if __name__ == '__main__':
    main()
