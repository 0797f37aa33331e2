"""User directory service.

Accounts are normally provisioned by the login flow; ``create_user`` backs
the ``flask create-user`` / ``flask seed-system-user`` commands.
"""

import logging

from email_validator import EmailNotValidError, validate_email

from arsenal.core.exceptions import ConflictError, ValidationError
from arsenal.models import db
from arsenal.models.user import THEATRES, VALID_ROLES, User
from arsenal.utils.helpers import atomic, get_or_404

logger = logging.getLogger(__name__)


def list_users() -> list[User]:
    return User.query.order_by(User.created_at.desc()).all()


def get_user(user_id: str) -> User:
    return get_or_404(User, user_id)


def normalise_email(email: str) -> str:
    """Validate syntax (no DNS lookup) and return the normalised address."""
    try:
        info = validate_email(email or "", check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError("Invalid email address", details={"email": str(exc)}) from exc
    return info.normalized


def create_user(email: str, name: str, role: str = "user", theatre: str | None = None,
                user_id: str | None = None) -> User:
    """Create a user row.

    Raises:
        ValidationError: bad email, empty name, unknown role or theatre.
        ConflictError: the email is already registered.
    """
    address = normalise_email(email)
    name = (name or "").strip()
    errors = {}
    if not name:
        errors["name"] = "Name is required"
    if role not in VALID_ROLES:
        errors["role"] = f"Must be one of: {', '.join(sorted(VALID_ROLES))}"
    if theatre and theatre not in THEATRES:
        errors["theatre"] = f"Must be one of: {', '.join(THEATRES)}"
    if errors:
        raise ValidationError("User data is invalid", details=errors)

    with atomic(conflict=ConflictError("User", "email", address, message="Email already registered")):
        user = User(email=address, name=name, role=role, theatre=theatre or None)
        if user_id:
            user.id = user_id
        db.session.add(user)

    logger.info("User created: %s (%s)", address, role, extra={"user_id": user.id})
    return user
