"""
Marketplace Service FastAPI Application.

This module exposes the marketplace over HTTP: registration and login, the
user's profile (with avatar), product listings with images, account deletion
and the public home and search pages.

Route handlers stay thin; the work happens in marketplace.services, which
raise the errors from marketplace.errors. Those are rendered here as
structured 422/403/404/500 responses.

Attributes:
    app (FastAPI): The FastAPI application instance configured with the title "marketplace-service".
"""
import logging
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from . import auth, config, models, schemas
from .auth import AuthContext
from .database import engine, get_db
from .errors import MarketplaceException, create_error_response
from .services import account, catalog, products, profile, registration
from .storage import AssetStore, get_asset_store

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="marketplace-service")

app.mount(
    "/imagens",
    StaticFiles(directory=str(Path(config.PUBLIC_DIR) / "imagens"), check_dir=False),
    name="imagens",
)


@app.exception_handler(MarketplaceException)
async def marketplace_exception_handler(request: Request, exc: MarketplaceException):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.detail}")
    return create_error_response(exc)


@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the marketplace service.

    Returns:
        dict: {"status": "healthy"} when the service is operational.
    """
    return {"status": "healthy"}


@app.post("/register", response_model=schemas.Registration, status_code=status.HTTP_201_CREATED)
def register(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    password_confirmation: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
):
    """
    Register a new user account and log it in.

    Returns:
        JWT access token and the created user

    Raises:
        422 listing every invalid field (including an email already in use)
    """
    user = registration.register(db, store, name, email, password, password_confirmation, image)
    return schemas.Registration(access_token=auth.token_for(user), user=schemas.User.model_validate(user))


@app.post("/login", response_model=schemas.Token)
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate and login a user.

    Raises:
        HTTPException: 401 if credentials are invalid
    """
    user = auth.authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return schemas.Token(access_token=auth.token_for(user))


@app.get("/home", response_model=schemas.Home)
def home(db: Session = Depends(get_db), store: AssetStore = Depends(get_asset_store)):
    """Featured products, the "Legumes" shelf and the static image manifest."""
    return catalog.home(db, store)


@app.get("/search", response_model=schemas.SearchResult)
def search(term: Optional[str] = None, db: Session = Depends(get_db)):
    """Search products by name."""
    return catalog.search(db, term)


@app.get("/profile", response_model=schemas.Profile)
def get_profile(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    user, owned = profile.view(db, ctx)
    return schemas.Profile(
        user=schemas.User.model_validate(user),
        products=[schemas.Product.model_validate(p) for p in owned],
    )


@app.post("/profile", response_model=schemas.UserRedirect)
def update_profile(
    name: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    """Update the display name and optionally replace the avatar."""
    user = profile.update(db, store, ctx, name, image)
    return schemas.UserRedirect(message="Profile updated successfully!", redirect_to="/profile", user=schemas.User.model_validate(user))


@app.delete("/profile", response_model=schemas.Redirect)
def delete_account(
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    """
    Delete the current account, its products and images, and end the session.

    The token used for this request is revoked.
    """
    name = account.delete_account(db, store, ctx)
    return schemas.Redirect(message=f"Account of {name} deleted successfully.", redirect_to="/")


@app.get("/products", response_model=List[schemas.Product])
def list_products(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    """List the current user's products."""
    return products.list_products(db, ctx)


@app.post("/products", response_model=schemas.ProductRedirect, status_code=status.HTTP_201_CREATED)
def create_product(
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    """Create a product owned by the current user. The image is required."""
    product = products.create_product(db, store, ctx, name, price, category, image)
    return schemas.ProductRedirect(message="Product added successfully!", redirect_to="/products", product=schemas.Product.model_validate(product))


@app.get("/products/{product_id}", response_model=schemas.Product)
def show_product(product_id: int, db: Session = Depends(get_db)):
    """
    Show any product by id.

    No authentication or ownership is required to view a product.

    Raises:
        404 if the product does not exist
    """
    return products.show_product(db, product_id)


@app.get("/products/{product_id}/edit", response_model=schemas.Product)
def edit_product(
    product_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    """Fetch a product for editing (owner only)."""
    return products.edit_product(db, ctx, product_id)


@app.put("/products/{product_id}", response_model=schemas.ProductRedirect)
def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    """Update a product (owner only), optionally replacing its image."""
    product = products.update_product(db, store, ctx, product_id, name, price, category, image)
    return schemas.ProductRedirect(message="Product updated successfully!", redirect_to="/products", product=schemas.Product.model_validate(product))


@app.delete("/products/{product_id}", response_model=schemas.Redirect)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    store: AssetStore = Depends(get_asset_store),
    ctx: AuthContext = Depends(auth.get_current_user),
):
    """Delete a product and its image (owner only)."""
    products.delete_product(db, store, ctx, product_id)
    return schemas.Redirect(message="Product deleted successfully!", redirect_to="/products")
