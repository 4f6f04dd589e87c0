from models import db


class BudgetTemplate(db.Model):
    """Reusable set of planned amounts that seeds a new budget's expense plans."""

    __tablename__ = "budget_templates"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)

    items = db.relationship(
        "BudgetTemplateItem", backref="template", cascade="all, delete-orphan"
    )

    def to_dict(self):
        items = sorted(self.items, key=lambda i: i.expense_category.name)
        return {
            "id": self.id,
            "name": self.name,
            "items": [i.to_dict() for i in items],
            "total_planned": sum(i.planned_amount for i in self.items),
        }


class BudgetTemplateItem(db.Model):
    __tablename__ = "budget_template_items"

    id = db.Column(db.Integer, primary_key=True)
    template_id = db.Column(db.Integer, db.ForeignKey("budget_templates.id"), nullable=False)
    expense_category_id = db.Column(
        db.Integer, db.ForeignKey("expense_categories.id"), nullable=False
    )
    planned_amount = db.Column(db.Float, nullable=False)

    expense_category = db.relationship("ExpenseCategory")

    __table_args__ = (
        db.UniqueConstraint("template_id", "expense_category_id", name="uq_template_expense_category"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "expense_category_id": self.expense_category_id,
            "expense_category_name": self.expense_category.name,
            "planned_amount": self.planned_amount,
        }
