"""
CRUD (Create, Read, Update, Delete) operations for the Marketplace service.

This module contains all database operations for users, products and revoked
tokens. Each write commits on its own; callers sequence them.
"""
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session
from . import models

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    """
    Retrieve a single user by ID.
    
    Args:
        db: Database session
        user_id: ID of the user to retrieve
        
    Returns:
        User object or None if not found
    """
    return db.query(models.User).filter(models.User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    """
    Retrieve a user by email address.
    
    Args:
        db: Database session
        email: Email address to search for
        
    Returns:
        User object or None if not found
    """
    return db.query(models.User).filter(models.User.email == email).first()

def create_user(db: Session, name: str, email: str, password_hash: str, avatar_ref: Optional[str] = None) -> models.User:
    """
    Create a new user in the database.
    
    Args:
        db: Database session
        name: Display name
        email: Unique email address
        password_hash: Already hashed password
        avatar_ref: Stored profile image filename, if any
        
    Returns:
        Created User object
    """
    db_user = models.User(name=name, email=email, password_hash=password_hash, avatar_ref=avatar_ref)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def save(db: Session, instance):
    """Commit pending changes on an already loaded instance and refresh it."""
    db.add(instance)
    db.commit()
    db.refresh(instance)
    return instance

def delete(db: Session, instance) -> None:
    """Delete a loaded instance and commit."""
    db.delete(instance)
    db.commit()

def get_product(db: Session, product_id: int) -> Optional[models.Product]:
    """
    Retrieve a single product by ID.

    Args:
        db: Database session
        product_id: ID of the product to retrieve

    Returns:
        Product object or None if not found
    """
    return db.query(models.Product).filter(models.Product.id == product_id).first()

def get_products_by_owner(db: Session, owner_id: int) -> List[models.Product]:
    """
    Retrieve every product owned by a user, oldest first.

    Args:
        db: Database session
        owner_id: ID of the owning user

    Returns:
        List of Product objects (empty if the user owns none)
    """
    return (
        db.query(models.Product)
        .filter(models.Product.owner_id == owner_id)
        .order_by(models.Product.id)
        .all()
    )

def get_products_by_categories(db: Session, categories: Sequence[str]) -> List[models.Product]:
    """Retrieve all products in any of the given categories."""
    return (
        db.query(models.Product)
        .filter(models.Product.category.in_(list(categories)))
        .order_by(models.Product.id)
        .all()
    )

def search_products_by_name(db: Session, term: str) -> List[models.Product]:
    """Retrieve products whose name contains term. Wildcards in term are matched literally."""
    return (
        db.query(models.Product)
        .filter(models.Product.name.contains(term, autoescape=True))
        .order_by(models.Product.id)
        .all()
    )

def create_product(db: Session, owner_id: int, name: str, price, category: str, image_ref: Optional[str]) -> models.Product:
    """
    Create a new product owned by owner_id.

    Returns:
        Created Product object
    """
    db_product = models.Product(
        owner_id=owner_id,
        name=name,
        price=price,
        category=category,
        image_ref=image_ref,
    )
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product

def revoke_token(db: Session, jti: str) -> None:
    """Record a token id as revoked. Revoking twice is a no-op."""
    if is_token_revoked(db, jti):
        return
    db.add(models.RevokedToken(jti=jti))
    db.commit()

def is_token_revoked(db: Session, jti: str) -> bool:
    return db.query(models.RevokedToken).filter(models.RevokedToken.jti == jti).first() is not None
