import structlog

from models import db, BudgetTemplate, BudgetTemplateItem
from services.errors import NotFoundError
from services.expenses import get_expense_category

log = structlog.get_logger(__name__)


def list_templates(user) -> list[BudgetTemplate]:
    return (
        BudgetTemplate.query.filter_by(user_id=user.id)
        .order_by(BudgetTemplate.name)
        .all()
    )


def get_template(user, template_id: int) -> BudgetTemplate:
    template = BudgetTemplate.query.filter_by(id=template_id, user_id=user.id).first()
    if template is None:
        raise NotFoundError(f"Template {template_id} not found")
    return template


def create_template(user, name: str) -> BudgetTemplate:
    template = BudgetTemplate(user_id=user.id, name=name)
    db.session.add(template)
    db.session.commit()
    log.info("template_created", user_id=user.id, template_id=template.id)
    return template


def rename_template(user, template_id: int, name: str) -> BudgetTemplate:
    template = get_template(user, template_id)
    template.name = name
    db.session.commit()
    return template


def delete_template(user, template_id: int) -> None:
    template = get_template(user, template_id)
    db.session.delete(template)
    db.session.commit()


def upsert_template_item(user, template_id: int, expense_category_id: int, planned_amount: float) -> BudgetTemplateItem:
    """One item per expense category; an existing item just gets the new amount."""
    template = get_template(user, template_id)
    get_expense_category(user, expense_category_id)

    item = BudgetTemplateItem.query.filter_by(
        template_id=template.id, expense_category_id=expense_category_id
    ).first()
    if item is None:
        item = BudgetTemplateItem(
            template_id=template.id, expense_category_id=expense_category_id
        )
        db.session.add(item)
    item.planned_amount = planned_amount
    db.session.commit()
    return item


def delete_template_item(user, template_id: int, item_id: int) -> None:
    template = get_template(user, template_id)
    item = BudgetTemplateItem.query.filter_by(id=item_id, template_id=template.id).first()
    if item is None:
        raise NotFoundError(f"Template item {item_id} not found")
    db.session.delete(item)
    db.session.commit()
