"""
Authentication and authorization utilities.

Provides password hashing, JWT token creation/validation, session termination
and the FastAPI dependency that turns a bearer token into an AuthContext.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
import logging
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .database import get_db
from .config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Security scheme for JWT bearer tokens
security = HTTPBearer()


@dataclass
class AuthContext:
    """
    The authenticated user of a request.

    Attributes:
        user: The user the token belongs to
        token_id: The token's jti, used to end the session
    """
    user: models.User
    token_id: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.
    
    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against
        
    Returns:
        True if the password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password for secure storage.
    
    Args:
        password: The plain text password to hash
        
    Returns:
        The hashed password
    """
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    A fresh jti is added to every token so its session can be revoked.
    
    Args:
        data: Dictionary containing the claims to encode in the token
        expires_delta: Optional custom expiration time delta
        
    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def token_for(user: models.User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


def authenticate_user(db: Session, email: str, password: str) -> Optional[models.User]:
    """
    Authenticate a user by email and password.
    
    Args:
        db: Database session
        email: User's email address
        password: Plain text password to verify
        
    Returns:
        User object if authentication succeeds, None otherwise
    """
    user = crud.get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> AuthContext:
    """
    FastAPI dependency to get the current authenticated user from JWT token.
    
    Args:
        credentials: HTTP Authorization credentials (injected)
        db: Database session (injected)
        
    Returns:
        AuthContext for the current user
        
    Raises:
        HTTPException: 401 if token is invalid, revoked or the user is gone
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    try:
        payload = jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM])
        user_id_str: str = payload.get("sub")
        jti: str = payload.get("jti")
        if user_id_str is None or jti is None:
            logger.error("Token is missing 'sub' or 'jti' claim")
            raise credentials_exception
        token_data = schemas.TokenData(
            user_id=int(user_id_str),
            email=payload.get("email"),
            jti=jti,
        )
    except (JWTError, ValueError) as e:
        logger.error(f"JWT validation error: {e}")
        raise credentials_exception

    if crud.is_token_revoked(db, token_data.jti):
        logger.info(f"Rejected revoked token {token_data.jti}")
        raise credentials_exception
    
    user = crud.get_user(db, token_data.user_id)
    # The token must name the same account it was issued for
    if user is None or user.email != token_data.email:
        raise credentials_exception
    return AuthContext(user=user, token_id=token_data.jti)


def end_session(db: Session, ctx: AuthContext) -> None:
    """Terminate the session that carried ctx by revoking its token."""
    crud.revoke_token(db, ctx.token_id)
    logger.info(f"Session {ctx.token_id} ended")
