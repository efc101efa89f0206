import logging

from .auth import Identity
from .errors import Forbidden

logger = logging.getLogger(__name__)


def assert_owner(identity: Identity, form, message: str = "You can only manage your own forms"):
    """Only the owner of a form may read its edit view or change anything in it."""
    if identity.is_anonymous or identity.id != form.owner_id:
        logger.warning(
            "User %s denied access to form %s (owned by user %s)",
            identity.id,
            form.id,
            form.owner_id,
        )
        raise Forbidden(message)


def assert_self(identity: Identity, user_id: int, message: str = "You can only update your own profile"):
    if identity.is_anonymous or identity.id != user_id:
        logger.warning("User %s denied access to user %s", identity.id, user_id)
        raise Forbidden(message)
