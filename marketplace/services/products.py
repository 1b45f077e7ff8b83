"""
Product listings owned by the authenticated user.

Every mutating operation checks ownership before touching the database or
the asset store. show_product is deliberately public.
"""
import logging
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session

from .. import crud, models, validators
from ..auth import AuthContext
from ..errors import ForbiddenError, NotFoundError
from ..storage import AssetStore, PRODUCT_IMAGES

logger = logging.getLogger(__name__)


def _get_or_404(db: Session, product_id: int) -> models.Product:
    product = crud.get_product(db, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def _get_owned(db: Session, ctx: AuthContext, product_id: int) -> models.Product:
    product = _get_or_404(db, product_id)
    if product.owner_id != ctx.user.id:
        logger.warning(f"User {ctx.user.id} denied access to product {product_id}")
        raise ForbiddenError("Product", product_id)
    return product


def _validate_form(name, price, category, image, image_required):
    """Validate a product form. Returns cleaned (name, price, category)."""
    name = validators.clean(name)
    category = validators.clean(category)

    errors = validators.FormErrors()
    validators.check_product_name(errors, name)
    parsed_price = validators.check_price(errors, validators.clean(price))
    validators.check_category(errors, category)
    validators.check_image(errors, image, required=image_required)
    errors.raise_if_any()
    return name, parsed_price, category


def list_products(db: Session, ctx: AuthContext) -> List[models.Product]:
    return crud.get_products_by_owner(db, ctx.user.id)


def create_product(
    db: Session,
    store: AssetStore,
    ctx: AuthContext,
    name: Optional[str],
    price: Optional[str],
    category: Optional[str],
    image: Optional[UploadFile],
) -> models.Product:
    """
    Create a product owned by the current user.

    Raises:
        ValidationError: if any field is invalid (the image is mandatory)
        StorageWriteError: if the image could not be stored
    """
    name, parsed_price, category = _validate_form(name, price, category, image, image_required=True)

    image_ref = store.store(PRODUCT_IMAGES, image)
    product = crud.create_product(
        db,
        owner_id=ctx.user.id,
        name=name,
        price=parsed_price,
        category=category,
        image_ref=image_ref,
    )
    logger.info(f"User {ctx.user.id} created product {product.id}")
    return product


def show_product(db: Session, product_id: int) -> models.Product:
    """Fetch any product by id, regardless of owner."""
    return _get_or_404(db, product_id)


def edit_product(db: Session, ctx: AuthContext, product_id: int) -> models.Product:
    """Fetch a product for editing; only its owner may do so."""
    return _get_owned(db, ctx, product_id)


def update_product(
    db: Session,
    store: AssetStore,
    ctx: AuthContext,
    product_id: int,
    name: Optional[str],
    price: Optional[str],
    category: Optional[str],
    image: Optional[UploadFile] = None,
) -> models.Product:
    """
    Update a product's fields and optionally replace its image.

    The image may be omitted only when the product already has one.

    Raises:
        NotFoundError: if the product does not exist
        ForbiddenError: if the current user does not own it
        ValidationError: if any field is invalid
    """
    product = _get_owned(db, ctx, product_id)
    name, parsed_price, category = _validate_form(
        name, price, category, image, image_required=not product.image_ref
    )

    product.name = name
    product.price = parsed_price
    product.category = category

    if validators.has_file(image):
        if product.image_ref:
            store.delete(PRODUCT_IMAGES, product.image_ref)
        product.image_ref = store.store(PRODUCT_IMAGES, image)

    crud.save(db, product)
    logger.info(f"User {ctx.user.id} updated product {product.id}")
    return product


def delete_product(db: Session, store: AssetStore, ctx: AuthContext, product_id: int) -> None:
    """
    Delete a product and its image.

    Raises:
        NotFoundError: if the product does not exist (including when already deleted)
        ForbiddenError: if the current user does not own it
    """
    product = _get_owned(db, ctx, product_id)
    if product.image_ref:
        store.delete(PRODUCT_IMAGES, product.image_ref)
    crud.delete(db, product)
    logger.info(f"User {ctx.user.id} deleted product {product_id}")
