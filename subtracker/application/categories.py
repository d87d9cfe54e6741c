"""
Category source: seeds the default set once and serves read-only lookups.
"""
import logging

from sqlalchemy.orm import Session

from subtracker.domain.category import DEFAULT_CATEGORIES
from subtracker.infrastructure.db.models import CategoryModel

logger = logging.getLogger(__name__)


def seed_default_categories(db: Session) -> int:
    """
    Insert the default categories that are missing (insert-or-ignore).

    Returns the number of categories inserted.
    """
    existing = {row[0] for row in db.query(CategoryModel.id).all()}
    added = 0
    for seed in DEFAULT_CATEGORIES:
        if seed.id in existing:
            continue
        db.add(CategoryModel(id=seed.id, name=seed.name, icon=seed.icon, color=seed.color))
        added += 1
    if added:
        db.commit()
        logger.info("Seeded %d default categories", added)
    return added


def list_categories(db: Session) -> list[CategoryModel]:
    return db.query(CategoryModel).order_by(CategoryModel.name.asc()).all()


def get_category(db: Session, category_id: str) -> CategoryModel | None:
    return db.get(CategoryModel, category_id)
