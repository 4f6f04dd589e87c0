import pytest

from models import FamilyGroup, FamilyMember, User
from models import db
from services import family
from services.errors import BudgetError, ConflictError, NotFoundError, PermissionDeniedError


@pytest.fixture
def third_user(app):
    user = User(external_id="user_sofia", name="Sofía", email="sofia@example.com")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def group(user):
    return family.create_group(user, "Casa")


def test_creator_becomes_owner(user, group):
    assert group.owner_id == user.id
    assert [(m.user_id, m.role) for m in group.members] == [(user.id, "OWNER")]
    assert family.list_my_groups(user) == [group]


def test_owner_invites_by_email(user, other_user, group):
    member = family.invite_member(user, group.id, "luis@example.com")
    assert member.role == "EDITOR"
    assert family.list_my_groups(other_user) == [group]


def test_invite_unknown_email(user, group):
    with pytest.raises(NotFoundError):
        family.invite_member(user, group.id, "nadie@example.com")


def test_invite_twice(user, other_user, group):
    family.invite_member(user, group.id, "luis@example.com")
    with pytest.raises(ConflictError):
        family.invite_member(user, group.id, "luis@example.com")


def test_only_owner_invites(user, other_user, third_user, group):
    family.invite_member(user, group.id, "luis@example.com")
    with pytest.raises(PermissionDeniedError):
        family.invite_member(other_user, group.id, "sofia@example.com")


def test_owner_removes_editor_but_not_self(user, other_user, group):
    member = family.invite_member(user, group.id, "luis@example.com")
    owner = FamilyMember.query.filter_by(family_group_id=group.id, role="OWNER").one()

    with pytest.raises(BudgetError):
        family.remove_member(user, group.id, owner.id)

    family.remove_member(user, group.id, member.id)
    assert family.list_my_groups(other_user) == []


def test_editor_leaves_owner_cannot(user, other_user, group):
    family.invite_member(user, group.id, "luis@example.com")

    with pytest.raises(BudgetError):
        family.leave_group(user, group.id)

    family.leave_group(other_user, group.id)
    assert family.list_my_groups(other_user) == []


def test_leave_when_not_member(other_user, group):
    with pytest.raises(NotFoundError):
        family.leave_group(other_user, group.id)


def test_only_owner_deletes(user, other_user, group):
    family.invite_member(user, group.id, "luis@example.com")
    with pytest.raises(PermissionDeniedError):
        family.delete_group(other_user, group.id)

    family.delete_group(user, group.id)
    assert FamilyGroup.query.count() == 0
    assert FamilyMember.query.count() == 0
