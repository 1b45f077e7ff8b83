"""
Pydantic schemas for request/response validation in the Marketplace service.

Form submissions (registration, profile, products) arrive as multipart data and
are validated by the services; these schemas cover JSON bodies and responses.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, EmailStr

class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str

class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"

class TokenData(BaseModel):
    """Schema for data stored in JWT token."""
    user_id: Optional[int] = None
    email: Optional[str] = None
    jti: Optional[str] = None

class User(BaseModel):
    """
    Schema for user responses, includes all database fields except password.
    
    Attributes:
        id (int): User's unique identifier
        name (str): User's display name
        email (str): User's email address
        avatar_ref (str): Stored profile image filename, or None
        created_at (datetime): When the user was created
    """
    id: int
    name: str
    email: str
    avatar_ref: Optional[str] = None
    created_at: datetime
    
    class Config:
        from_attributes = True

class Product(BaseModel):
    """Schema for product responses."""
    id: int
    name: str
    price: Decimal
    category: str
    image_ref: Optional[str] = None
    owner_id: int
    created_at: datetime

    class Config:
        from_attributes = True

class Registration(Token):
    """Token issued on registration together with the new account."""
    user: User

class Profile(BaseModel):
    """The authenticated user's record and the products they own."""
    user: User
    products: List[Product] = []

class Home(BaseModel):
    """Public home listing."""
    products: List[Product]
    legumes: List[Product]
    imagens: Dict[str, Any] = {}

class SearchResult(BaseModel):
    term: str
    products: List[Product]

class Redirect(BaseModel):
    """Outcome of a write: a flash message and the route to show next."""
    message: str
    redirect_to: str

class UserRedirect(Redirect):
    user: User

class ProductRedirect(Redirect):
    product: Product
