"""Profile page: the user's own record, owned products and profile edits."""
import logging
from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.orm import Session

from .. import crud, models, validators
from ..auth import AuthContext
from ..storage import AssetStore, PROFILE_IMAGES

logger = logging.getLogger(__name__)


def view(db: Session, ctx: AuthContext) -> Tuple[models.User, List[models.Product]]:
    """Return the current user and the products they own (possibly none)."""
    return ctx.user, crud.get_products_by_owner(db, ctx.user.id)


def update(
    db: Session,
    store: AssetStore,
    ctx: AuthContext,
    name: Optional[str],
    image: Optional[UploadFile] = None,
) -> models.User:
    """
    Change the display name and, if an image is given, replace the avatar.

    The previous avatar file is removed before the new one is stored.

    Raises:
        ValidationError: if the name or image is invalid
        StorageWriteError: if the new avatar could not be stored
    """
    name = validators.clean(name)

    errors = validators.FormErrors()
    validators.check_person_name(errors, name)
    validators.check_image(errors, image)
    errors.raise_if_any()

    user = ctx.user
    user.name = name

    if validators.has_file(image):
        if user.avatar_ref:
            store.delete(PROFILE_IMAGES, user.avatar_ref)
        user.avatar_ref = store.store(PROFILE_IMAGES, image)

    crud.save(db, user)
    logger.info(f"Updated profile of user {user.id}")
    return user
