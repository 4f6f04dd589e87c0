from datetime import datetime, timezone
from models import db

OWNER = "OWNER"
EDITOR = "EDITOR"


class FamilyGroup(db.Model):
    __tablename__ = "family_groups"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )

    members = db.relationship(
        "FamilyMember", backref="family_group", cascade="all, delete-orphan"
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "members": [m.to_dict() for m in self.members],
        }


class FamilyMember(db.Model):
    __tablename__ = "family_members"

    id = db.Column(db.Integer, primary_key=True)
    family_group_id = db.Column(
        db.Integer, db.ForeignKey("family_groups.id"), nullable=False
    )
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=EDITOR)  # 'OWNER' or 'EDITOR'

    user = db.relationship("User")

    __table_args__ = (
        db.UniqueConstraint("family_group_id", "user_id", name="uq_family_member"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "role": self.role,
            "user": self.user.to_dict(),
        }
