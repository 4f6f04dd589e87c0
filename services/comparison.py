"""
Assigned vs. planned vs. real comparisons for a budget.

Assigned comes from the user's allocation projected onto the budget's
available income; planned from the budget's expense plans; real from
the recorded expenses. Plans and expenses are grouped through their
expense category up to its budget category.
"""

from services.allocation import project, sort_categories

_NO_SUBCATEGORY = None


def sum_by_key(rows, key, value) -> dict:
    """
    Group-by-key sum.

    Args:
        rows: iterable of objects
        key: callable returning the group key for a row
        value: callable returning the numeric amount for a row

    Returns:
        {key: summed amount}
    """
    totals = {}
    for row in rows:
        k = key(row)
        totals[k] = totals.get(k, 0) + value(row)
    return totals


def planned_by_category(plans) -> dict[str, float]:
    return sum_by_key(
        plans,
        key=lambda p: p.expense_category.category_id,
        value=lambda p: p.planned_amount,
    )


def real_by_category(expenses) -> dict[str, float]:
    return sum_by_key(
        expenses,
        key=lambda e: e.expense_category.category_id,
        value=lambda e: e.amount,
    )


def compare_budget(categories, allocation: dict[str, float], available_income: float, plans, expenses) -> list[dict]:
    """
    One row per budget category.

    Returns:
        [
            {
                "category_id": "necesidades",
                "category_name": "Necesidades",
                "assigned_pct": 50.0,
                "assigned_amount": 5000.0,
                "planned_amount": 4200.0,
                "planned_pct": 42.0,
                "real_amount": 3900.0,
                "exceeded": False,
            },
            ...
        ]
    """
    assigned = project(allocation, available_income)
    planned = planned_by_category(plans)
    real = real_by_category(expenses)

    rows = []
    for category in sort_categories(categories):
        planned_amount = planned.get(category.id, 0)
        real_amount = real.get(category.id, 0)
        assigned_amount = assigned.get(category.id, 0)
        rows.append(
            {
                "category_id": category.id,
                "category_name": category.name,
                "assigned_pct": allocation.get(category.id, 0),
                "assigned_amount": assigned_amount,
                "planned_amount": planned_amount,
                "planned_pct": (
                    planned_amount / available_income * 100
                    if available_income > 0
                    else 0
                ),
                "real_amount": real_amount,
                "exceeded": real_amount > assigned_amount,
            }
        )
    return rows


def compare_expenses(plans, expenses) -> list[dict]:
    """
    Planned vs. real per expense category, nested by budget category and subcategory.

    Budget categories are ordered by `order` then name; subcategories put
    the "no subcategory" bucket first, then alphabetical; expense rows are
    alphabetical.
    """
    planned = sum_by_key(plans, key=lambda p: p.expense_category_id, value=lambda p: p.planned_amount)
    real = sum_by_key(expenses, key=lambda e: e.expense_category_id, value=lambda e: e.amount)

    expense_categories = {}
    for row in list(plans) + list(expenses):
        expense_categories.setdefault(row.expense_category_id, row.expense_category)

    groups = {}
    for ec_id, ec in expense_categories.items():
        budget_category = ec.budget_category
        group = groups.setdefault(
            budget_category.id,
            {
                "category_id": budget_category.id,
                "category_name": budget_category.name,
                "order": budget_category.order,
                "subcategories": {},
            },
        )
        sub_key = (ec.subcategory_id, ec.subcategory.name if ec.subcategory else _NO_SUBCATEGORY)
        group["subcategories"].setdefault(sub_key, []).append(
            {
                "expense_category_id": ec_id,
                "expense_category_name": ec.name,
                "color": ec.color,
                "planned_amount": planned.get(ec_id, 0),
                "real_amount": real.get(ec_id, 0),
                "exceeded": real.get(ec_id, 0) > planned.get(ec_id, 0),
            }
        )

    result = []
    for group in sorted(groups.values(), key=lambda g: (g["order"], g["category_name"])):
        subcategories = []
        # None sorts first; same-named subcategories stay apart by id
        for sub_key in sorted(group["subcategories"], key=lambda k: (k[0] is not None, k[1] or "", k[0] or 0)):
            sub_id, sub_name = sub_key
            rows = sorted(group["subcategories"][sub_key], key=lambda r: r["expense_category_name"])
            subcategories.append(
                {
                    "subcategory_id": sub_id,
                    "subcategory_name": sub_name,
                    "expenses": rows,
                    "planned_amount": sum(r["planned_amount"] for r in rows),
                    "real_amount": sum(r["real_amount"] for r in rows),
                }
            )
        result.append(
            {
                "category_id": group["category_id"],
                "category_name": group["category_name"],
                "subcategories": subcategories,
                "planned_amount": sum(s["planned_amount"] for s in subcategories),
                "real_amount": sum(s["real_amount"] for s in subcategories),
            }
        )
    return result
