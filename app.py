from datetime import date

import click
import structlog
from flask import Blueprint, Flask, jsonify, request
from flask_migrate import Migrate
from pydantic import ValidationError

from config import Config
from logging_config import configure_logging
from models import db
from schemas import (
    BudgetCreateIn,
    ExpenseCategoryIn,
    ExpenseIn,
    ExpensePlanIn,
    FamilyGroupIn,
    IncomeSourceIn,
    InviteIn,
    PercentagesIn,
    PresetIn,
    ProjectIn,
    RedistributeIn,
    SubcategoryIn,
    TemplateIn,
    TemplateItemIn,
)
from services import allocation, budgets, expenses, family, income, structure, templates
from services.errors import BudgetError
from services.identity import get_current_user

log = structlog.get_logger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")
migrate = Migrate()


def _payload(schema):
    return schema.model_validate(request.get_json(silent=True) or {})


# ── Errors ───────────────────────────────────────────────────────────────

@api.errorhandler(BudgetError)
def handle_budget_error(e):
    log.info("request_rejected", path=request.path, status=e.status_code, reason=e.message)
    return jsonify({"error": e.message}), e.status_code


@api.errorhandler(ValidationError)
def handle_validation_error(e):
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
        for err in e.errors()
    ]
    return jsonify({"error": "Invalid request", "details": errors}), 400


# ── Allocation engine ────────────────────────────────────────────────────

@api.route("/allocation/presets")
def list_presets():
    """Return the fixed distribution presets."""
    return jsonify(allocation.PRESETS)


@api.route("/allocation/redistribute", methods=["POST"])
def redistribute():
    """Apply one slider change and rescale the other categories."""
    data = _payload(RedistributeIn)
    result = allocation.redistribute(data.percentages, data.category_id, data.value)
    return jsonify(allocation.describe(result, data.available_income))


@api.route("/allocation/preset", methods=["POST"])
def apply_preset():
    """Overwrite the allocation from a preset, by name or by values."""
    data = _payload(PresetIn)
    values = data.values
    if values is None:
        values = allocation.find_preset(data.name)
        if values is None:
            return jsonify({"error": f"Unknown preset: {data.name}"}), 404

    result = allocation.apply_preset(structure.list_categories(), values)
    return jsonify(allocation.describe(result, data.available_income))


@api.route("/allocation/project", methods=["POST"])
def project_amounts():
    """Convert percentages into amounts of the given available income."""
    data = _payload(ProjectIn)
    return jsonify(allocation.describe(data.percentages, data.available_income))


# ── Budget structure ─────────────────────────────────────────────────────

@api.route("/structure")
def get_structure():
    """Return budget categories with the user's effective percentages."""
    user = get_current_user()
    categories = structure.categories_with_percentages(user)
    current = {c["id"]: c["user_percentage"] for c in categories}
    return jsonify({
        "categories": categories,
        "total": allocation.total(current),
        "is_valid": allocation.can_commit(current),
    })


@api.route("/structure", methods=["PUT"])
def save_structure():
    """Save the user's percentages (replaces all of them)."""
    user = get_current_user()
    data = _payload(PercentagesIn)
    saved = structure.save_category_percentages(user, [p.model_dump() for p in data.percentages])
    return jsonify({
        "message": f"Saved {len(saved)} category percentages",
        **allocation.describe(saved),
    })


@api.route("/structure/<category_id>/subcategories", methods=["POST"])
def create_subcategory(category_id):
    get_current_user()
    data = _payload(SubcategoryIn)
    subcategory = structure.create_subcategory(category_id, data.name)
    return jsonify(subcategory.to_dict()), 201


@api.route("/subcategories/<int:subcategory_id>", methods=["DELETE"])
def delete_subcategory(subcategory_id):
    get_current_user()
    structure.delete_subcategory(subcategory_id)
    return jsonify({"message": "Subcategory deleted"})


# ── Income sources ───────────────────────────────────────────────────────

@api.route("/incomes")
def list_incomes():
    user = get_current_user()
    return jsonify([s.to_dict() for s in income.list_income_sources(user)])


@api.route("/incomes", methods=["POST"])
def create_income():
    user = get_current_user()
    data = _payload(IncomeSourceIn)
    source = income.create_income_source(user, data.name, data.amount)
    return jsonify(source.to_dict()), 201


@api.route("/incomes/<int:source_id>", methods=["PUT"])
def update_income(source_id):
    user = get_current_user()
    data = _payload(IncomeSourceIn)
    source = income.update_income_source(user, source_id, data.name, data.amount)
    return jsonify(source.to_dict())


@api.route("/incomes/<int:source_id>/toggle", methods=["POST"])
def toggle_income(source_id):
    user = get_current_user()
    return jsonify(income.toggle_income_source(user, source_id).to_dict())


@api.route("/incomes/<int:source_id>", methods=["DELETE"])
def delete_income(source_id):
    user = get_current_user()
    income.delete_income_source(user, source_id)
    return jsonify({"message": "Income source deleted"})


# ── Expense categories ───────────────────────────────────────────────────

@api.route("/budget-categories")
def list_budget_categories():
    """Return budget categories with their subcategories."""
    get_current_user()
    return jsonify([
        {**c.to_dict(), "subcategories": [s.to_dict() for s in c.subcategories]}
        for c in structure.list_categories()
    ])


@api.route("/expense-categories")
def list_expense_categories():
    user = get_current_user()
    return jsonify([c.to_dict() for c in expenses.list_expense_categories(user)])


@api.route("/expense-categories", methods=["POST"])
def create_expense_category():
    user = get_current_user()
    data = _payload(ExpenseCategoryIn)
    category = expenses.create_expense_category(
        user, data.name, data.color, data.category_id, data.subcategory_id
    )
    return jsonify(category.to_dict()), 201


@api.route("/expense-categories/<int:expense_category_id>", methods=["PUT"])
def update_expense_category(expense_category_id):
    user = get_current_user()
    data = _payload(ExpenseCategoryIn)
    category = expenses.update_expense_category(
        user, expense_category_id, data.name, data.color, data.category_id, data.subcategory_id
    )
    return jsonify(category.to_dict())


@api.route("/expense-categories/<int:expense_category_id>", methods=["DELETE"])
def delete_expense_category(expense_category_id):
    user = get_current_user()
    expenses.delete_expense_category(user, expense_category_id)
    return jsonify({"message": "Expense category deleted"})


# ── Budgets ──────────────────────────────────────────────────────────────

@api.route("/budgets")
def list_budgets():
    user = get_current_user()
    return jsonify([b.to_dict() for b in budgets.list_budgets(user)])


@api.route("/budgets/active")
def active_budget():
    """Return the budget covering today, or null."""
    user = get_current_user()
    budget = budgets.get_active_budget(user, date.today())
    return jsonify(budget.to_detail_dict() if budget else None)


@api.route("/budgets/<int:budget_id>")
def get_budget(budget_id):
    user = get_current_user()
    return jsonify(budgets.get_budget(user, budget_id).to_detail_dict())


@api.route("/budgets", methods=["POST"])
def create_budget():
    """Create a budget from the wizard's income, deduction and distribution steps."""
    user = get_current_user()
    data = _payload(BudgetCreateIn)
    budget = budgets.create_budget(
        user,
        start_date=data.start_date,
        end_date=data.end_date,
        income_source_ids=data.income_source_ids,
        deductions=[d.model_dump(mode="json") for d in data.deductions],
        name=data.name,
        template_id=data.template_id,
        percentages=(
            [p.model_dump() for p in data.percentages]
            if data.percentages is not None
            else None
        ),
    )
    return jsonify(budget.to_detail_dict()), 201


@api.route("/budgets/<int:budget_id>", methods=["DELETE"])
def delete_budget(budget_id):
    user = get_current_user()
    budgets.delete_budget(user, budget_id)
    return jsonify({"message": "Budget deleted"})


@api.route("/budgets/<int:budget_id>/plans", methods=["PUT"])
def upsert_plan(budget_id):
    user = get_current_user()
    data = _payload(ExpensePlanIn)
    plan = budgets.upsert_expense_plan(
        user, budget_id, data.expense_category_id, data.planned_amount
    )
    return jsonify(plan.to_dict())


@api.route("/budgets/<int:budget_id>/plans/<int:plan_id>", methods=["DELETE"])
def delete_plan(budget_id, plan_id):
    user = get_current_user()
    budgets.delete_expense_plan(user, budget_id, plan_id)
    return jsonify({"message": "Expense plan deleted"})


@api.route("/budgets/<int:budget_id>/summary")
def budget_summary(budget_id):
    """Assigned vs. planned vs. real, per budget category and per expense category."""
    user = get_current_user()
    return jsonify(budgets.budget_summary(user, budget_id))


# ── Expenses ─────────────────────────────────────────────────────────────

@api.route("/budgets/<int:budget_id>/expenses")
def list_expenses(budget_id):
    user = get_current_user()
    return jsonify([e.to_dict() for e in expenses.list_expenses(user, budget_id)])


@api.route("/expenses", methods=["POST"])
def create_expense():
    user = get_current_user()
    data = _payload(ExpenseIn)
    expense = expenses.create_expense(
        user, data.budget_id, data.expense_category_id, data.name, data.amount, data.date
    )
    return jsonify(expense.to_dict()), 201


@api.route("/expenses/<int:expense_id>", methods=["PUT"])
def update_expense(expense_id):
    user = get_current_user()
    data = _payload(ExpenseIn)
    expense = expenses.update_expense(
        user, expense_id, data.expense_category_id, data.name, data.amount, data.date
    )
    return jsonify(expense.to_dict())


@api.route("/expenses/<int:expense_id>", methods=["DELETE"])
def delete_expense(expense_id):
    user = get_current_user()
    expenses.delete_expense(user, expense_id)
    return jsonify({"message": "Expense deleted"})


# ── Templates ────────────────────────────────────────────────────────────

@api.route("/templates")
def list_templates():
    user = get_current_user()
    return jsonify([t.to_dict() for t in templates.list_templates(user)])


@api.route("/templates", methods=["POST"])
def create_template():
    user = get_current_user()
    data = _payload(TemplateIn)
    return jsonify(templates.create_template(user, data.name).to_dict()), 201


@api.route("/templates/<int:template_id>", methods=["PUT"])
def rename_template(template_id):
    user = get_current_user()
    data = _payload(TemplateIn)
    return jsonify(templates.rename_template(user, template_id, data.name).to_dict())


@api.route("/templates/<int:template_id>", methods=["DELETE"])
def delete_template(template_id):
    user = get_current_user()
    templates.delete_template(user, template_id)
    return jsonify({"message": "Template deleted"})


@api.route("/templates/<int:template_id>/items", methods=["PUT"])
def upsert_template_item(template_id):
    user = get_current_user()
    data = _payload(TemplateItemIn)
    item = templates.upsert_template_item(
        user, template_id, data.expense_category_id, data.planned_amount
    )
    return jsonify(item.to_dict())


@api.route("/templates/<int:template_id>/items/<int:item_id>", methods=["DELETE"])
def delete_template_item(template_id, item_id):
    user = get_current_user()
    templates.delete_template_item(user, template_id, item_id)
    return jsonify({"message": "Template item deleted"})


# ── Family ───────────────────────────────────────────────────────────────

@api.route("/family")
def list_family_groups():
    user = get_current_user()
    return jsonify([g.to_dict() for g in family.list_my_groups(user)])


@api.route("/family", methods=["POST"])
def create_family_group():
    user = get_current_user()
    data = _payload(FamilyGroupIn)
    return jsonify(family.create_group(user, data.name).to_dict()), 201


@api.route("/family/<int:group_id>/members", methods=["POST"])
def invite_family_member(group_id):
    user = get_current_user()
    data = _payload(InviteIn)
    member = family.invite_member(user, group_id, data.email)
    return jsonify(member.to_dict()), 201


@api.route("/family/<int:group_id>/members/<int:member_id>", methods=["DELETE"])
def remove_family_member(group_id, member_id):
    user = get_current_user()
    family.remove_member(user, group_id, member_id)
    return jsonify({"message": "Member removed"})


@api.route("/family/<int:group_id>/leave", methods=["POST"])
def leave_family_group(group_id):
    user = get_current_user()
    family.leave_group(user, group_id)
    return jsonify({"message": "Left group"})


@api.route("/family/<int:group_id>", methods=["DELETE"])
def delete_family_group(group_id):
    user = get_current_user()
    family.delete_group(user, group_id)
    return jsonify({"message": "Group deleted"})


# ── App ──────────────────────────────────────────────────────────────────

def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)
    app.register_blueprint(api)

    @app.cli.command("seed")
    def seed():
        """Seed the default budget categories and subcategories."""
        created = structure.seed_defaults()
        click.echo(f"Seed completed ({created} rows created).")

    return app


if __name__ == "__main__":
    create_app().run(debug=True, port=5002)
