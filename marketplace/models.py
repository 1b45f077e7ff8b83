"""
SQLAlchemy ORM models for the Marketplace service.

Defines the database schema for users, their product listings and
revoked session tokens.
"""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from .database import Base


class Category(str, enum.Enum):
    """Closed set of product categories. Values are the stored labels."""
    FRUITS = "Frutas"
    VEGETABLES = "Hortaliças"
    LEAFY_GREENS = "Verduras"
    ROOT_VEGETABLES = "Legumes"
    OTHER = "Outros"

    @classmethod
    def values(cls):
        return [member.value for member in cls]


class User(Base):
    """
    User model representing a marketplace account.
    
    Attributes:
        id (int): Primary key, auto-incremented user ID
        name (str): Display name (letters and whitespace)
        email (str): User's email address (unique)
        password_hash (str): Hashed password
        avatar_ref (str): Stored filename of the profile image, if any
        created_at (datetime): Timestamp when the user was created
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    avatar_ref = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Product(Base):
    """
    Product listing owned by a single user.

    Owned products are fetched with crud.get_products_by_owner rather than
    through a relationship on User.
    """
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(255), nullable=False, index=True)
    image_ref = Column(String, nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class RevokedToken(Base):
    """Token ids whose sessions have been terminated."""
    __tablename__ = "revoked_tokens"

    jti = Column(String, primary_key=True)
    revoked_at = Column(DateTime, default=datetime.utcnow)
