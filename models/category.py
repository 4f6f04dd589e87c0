from models import db


class BudgetCategory(db.Model):
    """Top-level budget bucket (Necesidades, Gustos, Ahorro). Seeded, read-only."""

    __tablename__ = "budget_categories"

    id = db.Column(db.String(50), primary_key=True)  # slug, e.g. 'necesidades'
    name = db.Column(db.String(100), nullable=False)
    order = db.Column(db.Integer, nullable=False)
    default_percentage = db.Column(db.Float, nullable=False)

    subcategories = db.relationship(
        "BudgetSubcategory",
        backref="category",
        cascade="all, delete-orphan",
        order_by="BudgetSubcategory.name",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "default_percentage": self.default_percentage,
        }


class BudgetSubcategory(db.Model):
    __tablename__ = "budget_subcategories"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(
        db.String(50), db.ForeignKey("budget_categories.id"), nullable=False
    )
    name = db.Column(db.String(100), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
        }


class UserCategoryPercentage(db.Model):
    """A user's saved percentage for one budget category, overriding the default."""

    __tablename__ = "user_category_percentages"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    category_id = db.Column(
        db.String(50), db.ForeignKey("budget_categories.id"), nullable=False
    )
    percentage = db.Column(db.Float, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("user_id", "category_id", name="uq_user_category"),
    )

    def to_dict(self):
        return {
            "category_id": self.category_id,
            "percentage": self.percentage,
        }
