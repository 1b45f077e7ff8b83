"""
Account registration.

Validates the sign-up form, stores the optional avatar and creates the user.
"""
import logging
from typing import Optional

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import auth, crud, models, validators
from ..errors import ValidationError
from ..storage import AssetStore, PROFILE_IMAGES

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "This email is already in use."


def register(
    db: Session,
    store: AssetStore,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    password_confirmation: Optional[str],
    image: Optional[UploadFile] = None,
) -> models.User:
    """
    Create a new account.

    Args:
        db: Database session
        store: Asset store for the avatar
        name: Display name
        email: Email address, must not be registered yet
        password: Plain text password (min 8 chars)
        password_confirmation: Must equal password
        image: Optional avatar upload

    Returns:
        The created User

    Raises:
        ValidationError: listing every invalid field; nothing is written
        StorageWriteError: if the avatar could not be stored
    """
    name = validators.clean(name)
    email = validators.clean(email)

    errors = validators.FormErrors()
    validators.check_person_name(errors, name)
    normalized = validators.check_email(errors, email)
    if normalized:
        email = normalized
        if crud.get_user_by_email(db, email):
            errors.add("email", EMAIL_TAKEN)
    validators.check_password(errors, password, password_confirmation)
    validators.check_image(errors, image)
    errors.raise_if_any()

    avatar_ref = None
    if validators.has_file(image):
        avatar_ref = store.store(PROFILE_IMAGES, image)

    try:
        user = crud.create_user(
            db,
            name=name,
            email=email,
            password_hash=auth.get_password_hash(password),
            avatar_ref=avatar_ref,
        )
    except IntegrityError:
        # Lost a race with another registration for the same email
        db.rollback()
        logger.warning(f"Registration for {email} hit the unique constraint; removing stored avatar")
        store.delete(PROFILE_IMAGES, avatar_ref)
        raise ValidationError({"email": [EMAIL_TAKEN]})

    logger.info(f"Registered user {user.id} ({user.email})")
    return user
