"""
Expense categories (user-defined, filed under a budget category) and the
expenses recorded against a budget.
"""

import structlog

from models import (
    db,
    Budget,
    BudgetCategory,
    BudgetExpensePlan,
    BudgetSubcategory,
    BudgetTemplateItem,
    Expense,
    ExpenseCategory,
)
from services.errors import BudgetError, ConflictError, NotFoundError

log = structlog.get_logger(__name__)


# ── Expense categories ───────────────────────────────────────────────────

def list_expense_categories(user) -> list[ExpenseCategory]:
    return (
        ExpenseCategory.query.filter_by(user_id=user.id)
        .order_by(ExpenseCategory.category_id, ExpenseCategory.name)
        .all()
    )


def get_expense_category(user, expense_category_id: int) -> ExpenseCategory:
    category = ExpenseCategory.query.filter_by(
        id=expense_category_id, user_id=user.id
    ).first()
    if category is None:
        raise NotFoundError(f"Expense category {expense_category_id} not found")
    return category


def _check_parent(category_id: str, subcategory_id: int | None) -> None:
    if db.session.get(BudgetCategory, category_id) is None:
        raise NotFoundError(f"Category {category_id} not found")
    if subcategory_id is None:
        return
    subcategory = db.session.get(BudgetSubcategory, subcategory_id)
    if subcategory is None:
        raise NotFoundError(f"Subcategory {subcategory_id} not found")
    if subcategory.category_id != category_id:
        raise BudgetError(f"Subcategory {subcategory_id} does not belong to {category_id}")


def create_expense_category(user, name, color, category_id, subcategory_id=None) -> ExpenseCategory:
    _check_parent(category_id, subcategory_id)
    category = ExpenseCategory(
        user_id=user.id,
        name=name,
        color=color,
        category_id=category_id,
        subcategory_id=subcategory_id,
    )
    db.session.add(category)
    db.session.commit()
    log.info("expense_category_created", user_id=user.id, expense_category_id=category.id)
    return category


def update_expense_category(user, expense_category_id, name, color, category_id, subcategory_id=None) -> ExpenseCategory:
    category = get_expense_category(user, expense_category_id)
    _check_parent(category_id, subcategory_id)
    category.name = name
    category.color = color
    category.category_id = category_id
    category.subcategory_id = subcategory_id
    db.session.commit()
    return category


def delete_expense_category(user, expense_category_id: int) -> None:
    category = get_expense_category(user, expense_category_id)
    in_use = (
        Expense.query.filter_by(expense_category_id=category.id).first()
        or BudgetExpensePlan.query.filter_by(expense_category_id=category.id).first()
        or BudgetTemplateItem.query.filter_by(expense_category_id=category.id).first()
    )
    if in_use:
        raise ConflictError(f"Expense category {category.name} is in use")
    db.session.delete(category)
    db.session.commit()


# ── Expenses ─────────────────────────────────────────────────────────────

def list_expenses(user, budget_id: int) -> list[Expense]:
    return (
        Expense.query.filter_by(user_id=user.id, budget_id=budget_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )


def get_expense(user, expense_id: int) -> Expense:
    expense = Expense.query.filter_by(id=expense_id, user_id=user.id).first()
    if expense is None:
        raise NotFoundError(f"Expense {expense_id} not found")
    return expense


def create_expense(user, budget_id, expense_category_id, name, amount, date) -> Expense:
    if Budget.query.filter_by(id=budget_id, user_id=user.id).first() is None:
        raise NotFoundError(f"Budget {budget_id} not found")
    get_expense_category(user, expense_category_id)

    expense = Expense(
        user_id=user.id,
        budget_id=budget_id,
        expense_category_id=expense_category_id,
        name=name,
        amount=amount,
        date=date,
    )
    db.session.add(expense)
    db.session.commit()
    log.info("expense_created", user_id=user.id, budget_id=budget_id, amount=amount)
    return expense


def update_expense(user, expense_id, expense_category_id, name, amount, date) -> Expense:
    expense = get_expense(user, expense_id)
    get_expense_category(user, expense_category_id)
    expense.expense_category_id = expense_category_id
    expense.name = name
    expense.amount = amount
    expense.date = date
    db.session.commit()
    return expense


def delete_expense(user, expense_id: int) -> None:
    expense = get_expense(user, expense_id)
    db.session.delete(expense)
    db.session.commit()
