"""
Budget structure: the seeded budget categories, their subcategories and
each user's saved percentages.
"""

import structlog

from models import (
    db,
    BudgetCategory,
    BudgetSubcategory,
    ExpenseCategory,
    UserCategoryPercentage,
)
from services import allocation as engine
from services.errors import InvalidAllocationError, NotFoundError

log = structlog.get_logger(__name__)

DEFAULT_CATEGORIES = [
    {"id": "necesidades", "name": "Necesidades", "default_percentage": 50, "order": 1},
    {"id": "gustos", "name": "Gustos", "default_percentage": 30, "order": 2},
    {"id": "ahorro", "name": "Ahorro", "default_percentage": 20, "order": 3},
]

DEFAULT_SUBCATEGORIES = [
    ("necesidades", "Gastos Fijos"),
    ("necesidades", "Gastos Variables Necesarios"),
]


def list_categories() -> list[BudgetCategory]:
    return BudgetCategory.query.order_by(BudgetCategory.order, BudgetCategory.name).all()


def saved_percentages(user) -> dict[str, float]:
    return {
        p.category_id: p.percentage
        for p in UserCategoryPercentage.query.filter_by(user_id=user.id).all()
    }


def current_allocation(user) -> dict[str, float]:
    """The user's effective allocation: saved percentage, else category default."""
    return engine.initialize(list_categories(), saved_percentages(user))


def categories_with_percentages(user) -> list[dict]:
    allocation = current_allocation(user)
    result = []
    for category in list_categories():
        data = category.to_dict()
        data["user_percentage"] = allocation[category.id]
        data["subcategories"] = [s.to_dict() for s in category.subcategories]
        result.append(data)
    return result


def validate_percentages(percentages: list[dict]) -> dict[str, float]:
    """
    Check a full allocation before it is written.

    Returns:
        {category_id: percentage}

    Raises:
        InvalidAllocationError: duplicate, unknown or missing categories,
            or a total outside 100 ± 0.01
    """
    seen = [p["category_id"] for p in percentages]
    duplicates = sorted({cid for cid in seen if seen.count(cid) > 1})
    if duplicates:
        raise InvalidAllocationError(f"Duplicate categories: {', '.join(duplicates)}")

    allocation = {p["category_id"]: float(p["percentage"]) for p in percentages}

    known = {c.id for c in list_categories()}
    unknown = sorted(set(allocation) - known)
    if unknown:
        raise InvalidAllocationError(f"Unknown categories: {', '.join(unknown)}")
    missing = sorted(known - set(allocation))
    if missing:
        raise InvalidAllocationError(f"Missing categories: {', '.join(missing)}")

    if not engine.can_commit(allocation):
        raise InvalidAllocationError(
            f"Percentages must sum to 100 (got {engine.total(allocation):g})"
        )
    return allocation


def replace_percentages(user, allocation: dict[str, float]) -> None:
    """Stage the replacement of the user's saved percentages. Caller commits."""
    UserCategoryPercentage.query.filter_by(user_id=user.id).delete()
    for category_id, percentage in allocation.items():
        db.session.add(
            UserCategoryPercentage(
                user_id=user.id, category_id=category_id, percentage=percentage
            )
        )


def save_category_percentages(user, percentages: list[dict]) -> dict[str, float]:
    """
    Replace the user's saved percentages in one transaction.

    Args:
        percentages: [{"category_id": "necesidades", "percentage": 50}, ...]
    """
    try:
        allocation = validate_percentages(percentages)
    except InvalidAllocationError as e:
        log.warning("percentages_rejected", user_id=user.id, reason=e.message)
        raise

    try:
        replace_percentages(user, allocation)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    log.info("percentages_saved", user_id=user.id, percentages=allocation)
    return allocation


def create_subcategory(category_id: str, name: str) -> BudgetSubcategory:
    if db.session.get(BudgetCategory, category_id) is None:
        raise NotFoundError(f"Category {category_id} not found")

    subcategory = BudgetSubcategory(category_id=category_id, name=name)
    db.session.add(subcategory)
    db.session.commit()
    log.info("subcategory_created", category_id=category_id, subcategory_id=subcategory.id)
    return subcategory


def delete_subcategory(subcategory_id: int) -> None:
    subcategory = db.session.get(BudgetSubcategory, subcategory_id)
    if subcategory is None:
        raise NotFoundError(f"Subcategory {subcategory_id} not found")
    ExpenseCategory.query.filter_by(subcategory_id=subcategory_id).update(
        {"subcategory_id": None}
    )
    db.session.delete(subcategory)
    db.session.commit()


def seed_defaults() -> int:
    """Insert the default categories and subcategories. Safe to rerun."""
    created = 0
    for data in DEFAULT_CATEGORIES:
        if db.session.get(BudgetCategory, data["id"]) is None:
            db.session.add(BudgetCategory(**data))
            created += 1
    db.session.flush()

    for category_id, name in DEFAULT_SUBCATEGORIES:
        exists = BudgetSubcategory.query.filter_by(category_id=category_id, name=name).first()
        if not exists:
            db.session.add(BudgetSubcategory(category_id=category_id, name=name))
            created += 1

    db.session.commit()
    return created
