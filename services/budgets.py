"""
Budgets: creation from income sources, deductions and an optional
template, expense plans, and the assigned/planned/real summary.
"""

from datetime import date

import structlog

from models import (
    db,
    Budget,
    BudgetExpensePlan,
    BudgetIncome,
    BudgetTemplate,
    IncomeDeduction,
    IncomeSource,
)
from services import comparison, structure
from services.errors import BudgetError, NotFoundError
from services.expenses import get_expense_category

log = structlog.get_logger(__name__)

PERCENTAGE = "PERCENTAGE"
FIXED = "FIXED"


def deduction_amount(gross_income: float, deduction_type: str, value: float) -> float:
    if deduction_type == PERCENTAGE:
        return gross_income * value / 100
    return value


def compute_income(gross_income: float, deductions: list[dict]) -> dict:
    """
    Available income after deductions.

    Args:
        gross_income: sum of the selected income sources
        deductions: [{"name": "ISR", "type": "PERCENTAGE", "value": 10}, ...]

    Returns:
        {"gross_income": 20000, "total_deductions": 2500, "available_income": 17500}
    """
    total_deductions = sum(
        deduction_amount(gross_income, d["type"], d["value"]) for d in deductions
    )
    return {
        "gross_income": gross_income,
        "total_deductions": total_deductions,
        "available_income": gross_income - total_deductions,
    }


def list_budgets(user) -> list[Budget]:
    return (
        Budget.query.filter_by(user_id=user.id)
        .order_by(Budget.start_date.desc(), Budget.id.desc())
        .all()
    )


def get_budget(user, budget_id: int) -> Budget:
    budget = Budget.query.filter_by(id=budget_id, user_id=user.id).first()
    if budget is None:
        raise NotFoundError(f"Budget {budget_id} not found")
    return budget


def get_active_budget(user, today: date | None = None) -> Budget | None:
    """The budget whose period contains today; the newest one if several overlap."""
    today = today or date.today()
    return (
        Budget.query.filter(
            Budget.user_id == user.id,
            Budget.start_date <= today,
            Budget.end_date >= today,
        )
        .order_by(Budget.created_at.desc(), Budget.id.desc())
        .first()
    )


def create_budget(
    user,
    start_date: date,
    end_date: date,
    income_source_ids: list[int],
    deductions: list[dict] | None = None,
    name: str | None = None,
    template_id: int | None = None,
    percentages: list[dict] | None = None,
) -> Budget:
    """
    Create a budget in one transaction.

    Only the user's active income sources count towards gross income.
    Template items become expense plans. When the wizard sends its
    distribution step, the allocation is validated and saved as the
    user's percentages alongside the budget.
    """
    deductions = deductions or []

    allocation = None
    if percentages is not None:
        allocation = structure.validate_percentages(percentages)

    sources = IncomeSource.query.filter(
        IncomeSource.id.in_(income_source_ids),
        IncomeSource.user_id == user.id,
        IncomeSource.is_active.is_(True),
    ).all()
    if not sources:
        raise BudgetError("Select at least one active income source")

    template = None
    if template_id is not None:
        template = BudgetTemplate.query.filter_by(id=template_id, user_id=user.id).first()
        if template is None:
            raise NotFoundError(f"Template {template_id} not found")

    income = compute_income(sum(s.amount for s in sources), deductions)

    try:
        budget = Budget(
            user_id=user.id,
            name=name or None,
            start_date=start_date,
            end_date=end_date,
            total_income=income["available_income"],
            created_from_template_id=template_id,
        )
        db.session.add(budget)

        for source in sources:
            budget.incomes.append(BudgetIncome(income_source_id=source.id))
        for d in deductions:
            budget.deductions.append(
                IncomeDeduction(name=d["name"], type=d["type"], value=d["value"])
            )

        if template is not None:
            for item in template.items:
                budget.expense_plans.append(
                    BudgetExpensePlan(
                        expense_category_id=item.expense_category_id,
                        planned_amount=item.planned_amount,
                    )
                )
            budget.total_planned = sum(i.planned_amount for i in template.items)

        if allocation is not None:
            structure.replace_percentages(user, allocation)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    log.info(
        "budget_created",
        user_id=user.id,
        budget_id=budget.id,
        available_income=budget.total_income,
        template_id=template_id,
    )
    return budget


def delete_budget(user, budget_id: int) -> None:
    budget = get_budget(user, budget_id)
    db.session.delete(budget)
    db.session.commit()
    log.info("budget_deleted", user_id=user.id, budget_id=budget_id)


def upsert_expense_plan(user, budget_id: int, expense_category_id: int, planned_amount: float) -> BudgetExpensePlan:
    """Set the planned amount for one expense category and refresh the budget's total."""
    budget = get_budget(user, budget_id)
    get_expense_category(user, expense_category_id)

    plan = BudgetExpensePlan.query.filter_by(
        budget_id=budget.id, expense_category_id=expense_category_id
    ).first()
    if plan is None:
        plan = BudgetExpensePlan(expense_category_id=expense_category_id)
        budget.expense_plans.append(plan)
    plan.planned_amount = planned_amount

    budget.total_planned = sum(p.planned_amount for p in budget.expense_plans)
    db.session.commit()
    return plan


def delete_expense_plan(user, budget_id: int, plan_id: int) -> None:
    budget = get_budget(user, budget_id)
    plan = BudgetExpensePlan.query.filter_by(id=plan_id, budget_id=budget.id).first()
    if plan is None:
        raise NotFoundError(f"Expense plan {plan_id} not found")
    budget.expense_plans.remove(plan)
    budget.total_planned = sum(p.planned_amount for p in budget.expense_plans)
    db.session.commit()


def budget_summary(user, budget_id: int) -> dict:
    """
    Assigned vs. planned vs. real for a budget.

    Returns:
        {
            "budget": {...},
            "available_income": 10000,
            "total_planned": 8200,
            "total_real": 6100,
            "categories": [compare_budget rows...],
            "expense_categories": [compare_expenses groups...],
        }
    """
    budget = get_budget(user, budget_id)
    allocation = structure.current_allocation(user)
    plans = budget.expense_plans
    expenses = budget.expenses

    return {
        "budget": budget.to_dict(),
        "available_income": budget.total_income,
        "total_planned": sum(p.planned_amount for p in plans),
        "total_real": sum(e.amount for e in expenses),
        "categories": comparison.compare_budget(
            structure.list_categories(), allocation, budget.total_income, plans, expenses
        ),
        "expense_categories": comparison.compare_expenses(plans, expenses),
    }
