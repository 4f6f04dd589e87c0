"""
Proportional allocation engine.

Keeps a set of budget-category percentages summing to 100 while the user
moves one slider at a time, applies fixed presets, and projects
percentages into currency amounts.

An allocation is a plain dict {category_id: percentage}, in category
display order. Every function here returns a new dict and leaves its
input untouched.
"""

TOLERANCE = 0.01

PRESETS = [
    {"name": "50 · 30 · 20", "values": [50, 30, 20]},
    {"name": "60 · 20 · 20", "values": [60, 20, 20]},
    {"name": "70 · 20 · 10", "values": [70, 20, 10]},
]


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def sort_categories(categories) -> list:
    """Display order: category `order`, then name."""
    return sorted(categories, key=lambda c: (c.order, c.name))


def initialize(categories, saved: dict[str, float]) -> dict[str, float]:
    """
    Build the starting allocation for an editing session.

    Args:
        categories: BudgetCategory rows (or anything with id/name/order/default_percentage)
        saved: {category_id: percentage} previously saved by the user

    Returns:
        {category_id: percentage}, the saved value where present, else the default
    """
    allocation = {}
    for category in sort_categories(categories):
        override = saved.get(category.id)
        allocation[category.id] = float(
            override if override is not None else category.default_percentage
        )
    return allocation


def total(allocation: dict[str, float]) -> float:
    return sum(allocation.values())


def is_valid(allocation: dict[str, float]) -> bool:
    return abs(total(allocation) - 100) <= TOLERANCE


def can_commit(allocation: dict[str, float]) -> bool:
    """Whether the allocation may be saved. Same rule as is_valid()."""
    return is_valid(allocation)


def redistribute(allocation: dict[str, float], category_id: str, value: float) -> dict[str, float]:
    """
    Set one category's percentage and rescale the others to fill the rest.

    The untouched categories keep their shares of the remaining budget:
    with Gustos=30 and Ahorro=20, moving Necesidades from 50 to 70 leaves
    30 to split 3:2, so Gustos=18 and Ahorro=12.

    When the others are all zero or nothing remains, the changed category
    takes the whole budget and the others drop to zero.

    No re-normalisation happens here; drift is caught by can_commit().
    """
    value = _clamp(value)
    result = dict(allocation)
    result[category_id] = value

    others = [cid for cid in allocation if cid != category_id]
    others_total = sum(allocation[cid] for cid in others)
    remaining = 100 - value

    if others_total > 0 and remaining > 0:
        ratio = remaining / others_total
        for cid in others:
            result[cid] = _clamp(allocation[cid] * ratio)
    else:
        for cid in others:
            result[cid] = 0.0
        result[category_id] = 100.0

    return result


def apply_preset(categories, values: list[float]) -> dict[str, float]:
    """
    Overwrite the allocation from a preset, zipped by display order.

    Categories past the end of the preset get 0. The total is not checked
    here.
    """
    allocation = {}
    for i, category in enumerate(sort_categories(categories)):
        allocation[category.id] = float(values[i]) if i < len(values) else 0.0
    return allocation


def find_preset(name: str) -> list[float] | None:
    for preset in PRESETS:
        if preset["name"] == name:
            return list(preset["values"])
    return None


def project(allocation: dict[str, float], available_income: float) -> dict[str, float]:
    """Currency amount per category: available_income * pct / 100, unrounded."""
    return {
        cid: available_income * pct / 100
        for cid, pct in allocation.items()
    }


def display(allocation: dict[str, float]) -> dict[str, int]:
    """Whole-percent labels for the sliders. Internal values keep full precision."""
    return {cid: round(pct) for cid, pct in allocation.items()}


def describe(allocation: dict[str, float], available_income: float | None = None) -> dict:
    """Payload sent back to the presentation layer after every change."""
    payload = {
        "percentages": allocation,
        "display": display(allocation),
        "total": round(total(allocation), 4),
        "is_valid": can_commit(allocation),
    }
    if available_income is not None:
        payload["amounts"] = project(allocation, available_income)
    return payload
