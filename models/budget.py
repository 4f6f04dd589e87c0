from datetime import datetime, timezone
from models import db


class Budget(db.Model):
    """A budget period. total_income holds the available income (gross minus deductions)."""

    __tablename__ = "budgets"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(200))
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    total_income = db.Column(db.Float, nullable=False, default=0)
    total_planned = db.Column(db.Float, nullable=False, default=0)
    created_from_template_id = db.Column(
        db.Integer, db.ForeignKey("budget_templates.id", ondelete="SET NULL")
    )
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )

    incomes = db.relationship("BudgetIncome", backref="budget", cascade="all, delete-orphan")
    deductions = db.relationship("IncomeDeduction", backref="budget", cascade="all, delete-orphan")
    expense_plans = db.relationship(
        "BudgetExpensePlan", backref="budget", cascade="all, delete-orphan"
    )
    expenses = db.relationship("Expense", backref="budget", cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_income": self.total_income,
            "total_planned": self.total_planned,
            "created_from_template_id": self.created_from_template_id,
        }

    def to_detail_dict(self):
        data = self.to_dict()
        data["incomes"] = [i.to_dict() for i in self.incomes]
        data["deductions"] = [d.to_dict() for d in self.deductions]
        data["expense_plans"] = [p.to_dict() for p in self.expense_plans]
        return data


class BudgetIncome(db.Model):
    __tablename__ = "budget_incomes"

    id = db.Column(db.Integer, primary_key=True)
    budget_id = db.Column(db.Integer, db.ForeignKey("budgets.id"), nullable=False)
    income_source_id = db.Column(
        db.Integer, db.ForeignKey("income_sources.id"), nullable=False
    )

    income_source = db.relationship("IncomeSource")

    def to_dict(self):
        return {
            "income_source_id": self.income_source_id,
            "name": self.income_source.name,
            "amount": self.income_source.amount,
        }


class IncomeDeduction(db.Model):
    __tablename__ = "income_deductions"

    id = db.Column(db.Integer, primary_key=True)
    budget_id = db.Column(db.Integer, db.ForeignKey("budgets.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # 'PERCENTAGE' or 'FIXED'
    value = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "value": self.value,
        }


class BudgetExpensePlan(db.Model):
    """Planned amount for one expense category within a budget."""

    __tablename__ = "budget_expense_plans"

    id = db.Column(db.Integer, primary_key=True)
    budget_id = db.Column(db.Integer, db.ForeignKey("budgets.id"), nullable=False)
    expense_category_id = db.Column(
        db.Integer, db.ForeignKey("expense_categories.id"), nullable=False
    )
    planned_amount = db.Column(db.Float, nullable=False)

    expense_category = db.relationship("ExpenseCategory")

    __table_args__ = (
        db.UniqueConstraint("budget_id", "expense_category_id", name="uq_budget_expense_category"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "expense_category_id": self.expense_category_id,
            "planned_amount": self.planned_amount,
        }
