"""
Request payloads.

Routes parse request.json into these models; a pydantic ValidationError
becomes a 400.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class DeductionType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


# ── Allocation ───────────────────────────────────────────────────────────

class PercentageIn(_Payload):
    category_id: str = Field(..., min_length=1)
    percentage: float = Field(..., ge=0, le=100)


class PercentagesIn(_Payload):
    percentages: list[PercentageIn] = Field(..., min_length=1)


class RedistributeIn(_Payload):
    percentages: dict[str, float]
    category_id: str = Field(..., min_length=1)
    # Out-of-range values are clamped by the engine, not rejected
    value: float
    available_income: Optional[float] = None


class PresetIn(_Payload):
    name: Optional[str] = None
    values: Optional[list[float]] = None
    available_income: Optional[float] = None

    @model_validator(mode="after")
    def _name_or_values(self):
        if self.name is None and self.values is None:
            raise ValueError("Provide a preset name or values")
        return self


class ProjectIn(_Payload):
    percentages: dict[str, float]
    available_income: float


class SubcategoryIn(_Payload):
    name: str = Field(..., min_length=1, max_length=100)


# ── Income / categories / expenses ───────────────────────────────────────

class IncomeSourceIn(_Payload):
    name: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)


class ExpenseCategoryIn(_Payload):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=20)
    category_id: str = Field(..., min_length=1)
    subcategory_id: Optional[int] = None


class ExpenseIn(_Payload):
    budget_id: int
    expense_category_id: int
    name: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)
    date: datetime.date


# ── Budgets ──────────────────────────────────────────────────────────────

class DeductionIn(_Payload):
    name: str = Field(..., min_length=1, max_length=200)
    type: DeductionType
    value: float = Field(..., gt=0)


class BudgetCreateIn(_Payload):
    name: Optional[str] = None
    start_date: datetime.date
    end_date: datetime.date
    template_id: Optional[int] = None
    income_source_ids: list[int] = Field(..., min_length=1)
    deductions: list[DeductionIn] = Field(default_factory=list)
    # Allocation chosen in the wizard's distribution step, if any
    percentages: Optional[list[PercentageIn]] = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ExpensePlanIn(_Payload):
    expense_category_id: int
    planned_amount: float = Field(..., gt=0)


# ── Templates / family ───────────────────────────────────────────────────

class TemplateIn(_Payload):
    name: str = Field(..., min_length=1, max_length=200)


class TemplateItemIn(_Payload):
    expense_category_id: int
    planned_amount: float = Field(..., gt=0)


class FamilyGroupIn(_Payload):
    name: str = Field(..., min_length=1, max_length=200)


class InviteIn(_Payload):
    email: str = Field(..., min_length=3, max_length=200)
