"""Principal (administrator) services.

The principal store is the project's AUTH_USER_MODEL. The booking ledger only
needs ``resolve_principal`` to validate the id it records; the other
functions cover the administrator lifecycle.
"""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.db.models import Q

from ..exceptions import DuplicateName, InvalidInput, InvalidPrincipal
from ..storage import StorageContext, get_storage
from ..validators import coerce_id

logger = logging.getLogger(__name__)


def resolve_principal(principal_id, *, storage: StorageContext | None = None):
    """
    Return the active principal with this id.

    Raises:
        InvalidPrincipal: If the id is malformed, unknown or inactive
    """
    storage = get_storage(storage)
    if principal_id is None:
        raise InvalidPrincipal("A principal id is required")
    try:
        pk = coerce_id(principal_id, "principal_id")
    except InvalidInput:
        raise InvalidPrincipal(f"Invalid principal id {principal_id!r}")

    users = storage.objects(get_user_model(), "_default_manager")
    with storage.guard():
        principal = users.filter(pk=pk, is_active=True).first()
    if principal is None:
        raise InvalidPrincipal(f"Principal '{principal_id}' is unknown or inactive")
    return principal


def authenticate_principal(username: str, password: str):
    """
    Check credentials and return the principal.

    Raises:
        InvalidPrincipal: If username/password are missing or do not match
    """
    if not username or not password:
        raise InvalidPrincipal("Username and password are required")

    principal = authenticate(username=username, password=password)
    if principal is None:
        logger.info(f"Authentication failed for '{username}'")
        raise InvalidPrincipal("Invalid username or password")
    return principal


def create_principal(
    username: str,
    password: str,
    full_name: str = "",
    email: str = "",
    *,
    storage: StorageContext | None = None,
):
    """
    Create an administrator account.

    Raises:
        InvalidInput: If username or password is blank
        DuplicateName: If the username or email is taken
    """
    storage = get_storage(storage)
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not password:
        raise InvalidInput("Username and password are required")

    first_name, _, last_name = (full_name or "").strip().partition(" ")
    users = storage.objects(get_user_model(), "_default_manager")

    with storage.atomic():
        clash = Q(username=username)
        if email:
            clash |= Q(email__iexact=email)
        if users.filter(clash).exists():
            raise DuplicateName(f"Username '{username}' or email '{email}' already exists")

        principal = users.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name.strip(),
        )

    logger.info(f"Created principal {principal.pk} ('{username}')")
    return principal


def change_password(principal_id, new_password: str, *, storage: StorageContext | None = None):
    """
    Set a new password for an active principal.

    Raises:
        InvalidPrincipal: If the principal is unknown or inactive
        InvalidInput: If the new password is blank
    """
    storage = get_storage(storage)
    if not new_password:
        raise InvalidInput("New password is required")

    with storage.atomic():
        principal = resolve_principal(principal_id, storage=storage)
        principal.set_password(new_password)
        principal.save(using=storage.alias, update_fields=["password"])

    logger.info(f"Changed password for principal {principal.pk}")
    return principal
