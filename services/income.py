import structlog

from models import db, BudgetIncome, IncomeSource
from services.errors import ConflictError, NotFoundError

log = structlog.get_logger(__name__)


def list_income_sources(user) -> list[IncomeSource]:
    return (
        IncomeSource.query.filter_by(user_id=user.id)
        .order_by(IncomeSource.created_at, IncomeSource.id)
        .all()
    )


def get_income_source(user, source_id: int) -> IncomeSource:
    source = IncomeSource.query.filter_by(id=source_id, user_id=user.id).first()
    if source is None:
        raise NotFoundError(f"Income source {source_id} not found")
    return source


def create_income_source(user, name: str, amount: float) -> IncomeSource:
    source = IncomeSource(user_id=user.id, name=name, amount=amount)
    db.session.add(source)
    db.session.commit()
    log.info("income_source_created", user_id=user.id, income_source_id=source.id)
    return source


def update_income_source(user, source_id: int, name: str, amount: float) -> IncomeSource:
    source = get_income_source(user, source_id)
    source.name = name
    source.amount = amount
    db.session.commit()
    return source


def toggle_income_source(user, source_id: int) -> IncomeSource:
    source = get_income_source(user, source_id)
    source.is_active = not source.is_active
    db.session.commit()
    return source


def delete_income_source(user, source_id: int) -> None:
    source = get_income_source(user, source_id)
    if BudgetIncome.query.filter_by(income_source_id=source.id).first():
        raise ConflictError(f"Income source {source.name} is used by a budget")
    db.session.delete(source)
    db.session.commit()
    log.info("income_source_deleted", user_id=user.id, income_source_id=source_id)
