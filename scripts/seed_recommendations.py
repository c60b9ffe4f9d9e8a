"""Load recommendation records from a JSON file into the configured store.

Stands in for the upstream AI producer during development. Run manually:

    python -m scripts.seed_recommendations path/to/recommendations.json

The file holds a JSON array of records in the API wire shape (camelCase or
snake_case keys). Records whose id already exists are skipped.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, List

import structlog

from recommendation_service.config import load_config
from recommendation_service.db.session import init_db, make_engine, make_session_factory
from recommendation_service.errors import InvalidArgument
from recommendation_service.logging_setup import configure_logging
from recommendation_service.schemas.recommendation import Recommendation
from recommendation_service.services.recommendation_store import RecommendationStore


logger = structlog.get_logger(__name__)


def seed(store: RecommendationStore, items: List[dict[str, Any]]) -> int:
    """Append each item to the store; returns how many were new."""
    added = 0
    for item in items:
        rec = Recommendation.model_validate(item)
        try:
            store.add(rec)
            added += 1
        except InvalidArgument:
            logger.warning("recommendation_skipped_duplicate", recommendation_id=rec.id)
    return added


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path", type=Path, help="JSON array of recommendation records")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    configure_logging(cfg.logging)

    engine = make_engine(cfg.database.url)
    init_db(engine)
    store = RecommendationStore(make_session_factory(engine))

    with args.path.open("r", encoding="utf-8") as f:
        items = json.load(f)

    added = seed(store, items)
    logger.info("seed_complete", added=added, total=len(items))


if __name__ == "__main__":
    main()
