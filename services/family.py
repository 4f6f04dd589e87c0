"""
Family sharing. A group has one OWNER (its creator) and any number of
EDITORs; only the owner manages membership.
"""

import structlog

from models import db, FamilyGroup, FamilyMember, User
from models.family import EDITOR, OWNER
from services.errors import BudgetError, ConflictError, NotFoundError, PermissionDeniedError

log = structlog.get_logger(__name__)


def list_my_groups(user) -> list[FamilyGroup]:
    memberships = FamilyMember.query.filter_by(user_id=user.id).all()
    return [m.family_group for m in memberships]


def _get_group(group_id: int) -> FamilyGroup:
    group = db.session.get(FamilyGroup, group_id)
    if group is None:
        raise NotFoundError(f"Family group {group_id} not found")
    return group


def _require_owner(user, group_id: int) -> FamilyGroup:
    group = _get_group(group_id)
    owner = FamilyMember.query.filter_by(
        family_group_id=group.id, user_id=user.id, role=OWNER
    ).first()
    if owner is None:
        raise PermissionDeniedError("Only the group owner can do this")
    return group


def create_group(user, name: str) -> FamilyGroup:
    try:
        group = FamilyGroup(name=name, owner_id=user.id)
        group.members.append(FamilyMember(user_id=user.id, role=OWNER))
        db.session.add(group)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    log.info("family_group_created", user_id=user.id, family_group_id=group.id)
    return group


def invite_member(user, group_id: int, email: str) -> FamilyMember:
    group = _require_owner(user, group_id)

    invited = User.query.filter_by(email=email).first()
    if invited is None:
        raise NotFoundError(f"No user found with email {email}")

    if FamilyMember.query.filter_by(family_group_id=group.id, user_id=invited.id).first():
        raise ConflictError("User is already a member of this group")

    member = FamilyMember(family_group_id=group.id, user_id=invited.id, role=EDITOR)
    db.session.add(member)
    db.session.commit()
    log.info("family_member_invited", family_group_id=group.id, user_id=invited.id)
    return member


def remove_member(user, group_id: int, member_id: int) -> None:
    group = _require_owner(user, group_id)

    member = FamilyMember.query.filter_by(id=member_id, family_group_id=group.id).first()
    if member is None:
        raise NotFoundError(f"Member {member_id} not found")
    if member.role == OWNER:
        raise BudgetError("The owner cannot be removed")

    db.session.delete(member)
    db.session.commit()


def leave_group(user, group_id: int) -> None:
    membership = FamilyMember.query.filter_by(family_group_id=group_id, user_id=user.id).first()
    if membership is None:
        raise NotFoundError("You are not a member of this group")
    if membership.role == OWNER:
        raise BudgetError("The owner cannot leave the group; delete it instead")

    db.session.delete(membership)
    db.session.commit()


def delete_group(user, group_id: int) -> None:
    group = _get_group(group_id)
    if group.owner_id != user.id:
        raise PermissionDeniedError("Only the group owner can do this")
    db.session.delete(group)
    db.session.commit()
    log.info("family_group_deleted", user_id=user.id, family_group_id=group_id)
