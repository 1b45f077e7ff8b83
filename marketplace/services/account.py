"""
Account deletion.

Removes the user's products and their images, the avatar, the user row and
finally the session. Steps are committed one by one and are not rolled back
if a later step fails; the log records how far the cascade got.
"""
import logging

from sqlalchemy.orm import Session

from .. import auth, crud
from ..auth import AuthContext
from ..storage import AssetStore, PRODUCT_IMAGES, PROFILE_IMAGES

logger = logging.getLogger(__name__)


def delete_account(db: Session, store: AssetStore, ctx: AuthContext) -> str:
    """
    Delete the current user's account and everything it owns.

    Returns:
        The deleted user's display name, for the farewell message
    """
    user = ctx.user
    user_id = user.id
    user_name = user.name

    products = crud.get_products_by_owner(db, user_id)
    logger.info(f"Deleting account {user_id} with {len(products)} products")

    for product in products:
        if product.image_ref:
            store.delete(PRODUCT_IMAGES, product.image_ref)
        product_id = product.id
        crud.delete(db, product)
        logger.info(f"Account {user_id}: deleted product {product_id}")

    if user.avatar_ref:
        store.delete(PROFILE_IMAGES, user.avatar_ref)

    crud.delete(db, user)
    logger.info(f"Account {user_id}: deleted user row")

    auth.end_session(db, ctx)
    return user_name
