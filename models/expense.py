from datetime import datetime, timezone
from models import db


class ExpenseCategory(db.Model):
    """User-defined spending category (e.g. 'Renta'), filed under a budget category."""

    __tablename__ = "expense_categories"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(20), nullable=False)  # hex, e.g. '#B8C9B8'
    category_id = db.Column(
        db.String(50), db.ForeignKey("budget_categories.id"), nullable=False
    )
    subcategory_id = db.Column(
        db.Integer, db.ForeignKey("budget_subcategories.id"), nullable=True
    )

    budget_category = db.relationship("BudgetCategory")
    subcategory = db.relationship("BudgetSubcategory")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "category_id": self.category_id,
            "category_name": self.budget_category.name if self.budget_category else None,
            "subcategory_id": self.subcategory_id,
            "subcategory_name": self.subcategory.name if self.subcategory else None,
        }


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    budget_id = db.Column(db.Integer, db.ForeignKey("budgets.id"), nullable=False, index=True)
    expense_category_id = db.Column(
        db.Integer, db.ForeignKey("expense_categories.id"), nullable=False
    )
    name = db.Column(db.String(200), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    date = db.Column(db.Date, nullable=False)
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )

    expense_category = db.relationship("ExpenseCategory")

    def to_dict(self):
        return {
            "id": self.id,
            "budget_id": self.budget_id,
            "expense_category_id": self.expense_category_id,
            "name": self.name,
            "amount": self.amount,
            "date": self.date.isoformat(),
        }
