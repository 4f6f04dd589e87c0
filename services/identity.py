"""
Current-user lookup.

The identity provider authenticates requests upstream and forwards the
user as headers. Users are created on first sight so the service works
without a provisioning webhook.
"""

import structlog
from flask import request
from sqlalchemy.exc import IntegrityError

from models import db, User
from services.errors import ConflictError, NotAuthenticatedError

log = structlog.get_logger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"
USER_NAME_HEADER = "X-User-Name"


def get_current_user() -> User:
    external_id = request.headers.get(USER_ID_HEADER, "").strip()
    if not external_id:
        raise NotAuthenticatedError("Not authenticated")

    user = User.query.filter_by(external_id=external_id).first()
    if user is None:
        email = request.headers.get(USER_EMAIL_HEADER, "").strip()
        if not email:
            raise NotAuthenticatedError("Not authenticated")
        if User.query.filter_by(email=email).first():
            raise ConflictError(f"Email {email} belongs to another account")
        name = request.headers.get(USER_NAME_HEADER, "").strip() or email
        user = User(external_id=external_id, name=name, email=email)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(f"Email {email} belongs to another account")
        log.info("user_created", user_id=user.id)

    return user
