"""Public home listing and product search."""
from typing import Optional

from sqlalchemy.orm import Session

from .. import crud, validators
from ..models import Category
from ..storage import AssetStore

FEATURED_CATEGORIES = (Category.FRUITS.value, Category.VEGETABLES.value, Category.LEAFY_GREENS.value)


def home(db: Session, store: AssetStore) -> dict:
    """
    Products for the home page.

    Returns:
        dict with the featured-category products, the "Legumes" products and
        the static image manifest
    """
    return {
        "products": crud.get_products_by_categories(db, FEATURED_CATEGORIES),
        "legumes": crud.get_products_by_categories(db, [Category.ROOT_VEGETABLES.value]),
        "imagens": store.load_manifest(),
    }


def search(db: Session, term: Optional[str]) -> dict:
    """
    Products whose name contains term. An empty term matches everything.

    Raises:
        ValidationError: if the term is longer than 100 characters
    """
    term = validators.clean(term)
    errors = validators.FormErrors()
    validators.check_search_term(errors, term)
    errors.raise_if_any()
    return {"term": term, "products": crud.search_products_by_name(db, term)}
