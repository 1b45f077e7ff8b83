"""
Form validation for the Marketplace service.

Each check appends messages to a FormErrors collection instead of stopping at
the first failure, so a rejected form reports every invalid field at once.
"""
import os
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from email_validator import EmailNotValidError, validate_email
from fastapi import UploadFile

from . import config
from .errors import ValidationError
from .models import Category

# Unicode letters and whitespace
NAME_PATTERN = re.compile(r"^(?:[^\W\d_]|\s)+$")

ALLOWED_IMAGE_EXTENSIONS = ("jpeg", "png", "jpg", "webp")
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")

# Plain decimal number: no sign, exponent or digit separators
PRICE_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]+)?")

MIN_PRICE = Decimal("0.01")
MAX_PRICE = Decimal("5000.00")


class FormErrors:
    """Field name -> list of messages."""

    def __init__(self):
        self.errors: Dict[str, List[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def __contains__(self, field: str) -> bool:
        return field in self.errors

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def clean(value: Optional[str]) -> str:
    """Trim form input; missing values become the empty string."""
    return (value or "").strip()


def has_file(upload: Optional[UploadFile]) -> bool:
    """True when the form actually carried a file."""
    return upload is not None and bool(upload.filename)


def check_person_name(errors: FormErrors, value: str, field: str = "name") -> None:
    if not value:
        errors.add(field, "The name is required.")
        return
    if len(value) > 100:
        errors.add(field, "The name may not be longer than 100 characters.")
    if not NAME_PATTERN.match(value):
        errors.add(field, "The name may only contain letters and spaces.")


def check_email(errors: FormErrors, value: str, field: str = "email") -> Optional[str]:
    """
    Validate an email address.

    Returns:
        The normalized address (domain lowercased, as EmailStr does), or None
        if it failed validation
    """
    if not value:
        errors.add(field, "The email is required.")
        return None
    if len(value) > 255:
        errors.add(field, "The email may not be longer than 255 characters.")
        return None
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        errors.add(field, "The email must be a valid email address.")
        return None


def check_password(errors: FormErrors, password: Optional[str], confirmation: Optional[str], field: str = "password") -> None:
    # Passwords are not trimmed
    if not password:
        errors.add(field, "The password is required.")
        return
    if len(password) < 8:
        errors.add(field, "The password must be at least 8 characters.")
    if password != confirmation:
        errors.add(field, "The password confirmation does not match.")


def upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def check_image(errors: FormErrors, upload: Optional[UploadFile], field: str = "image", required: bool = False) -> None:
    """
    Validate an optional or required image upload.

    Accepted: jpeg, png, jpg, webp up to MAX_IMAGE_SIZE_KB kilobytes.
    """
    if not has_file(upload):
        if required:
            errors.add(field, "The image is required.")
        return

    extension = os.path.splitext(upload.filename)[1].lstrip(".").lower()
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS or (
        content_type and content_type not in ALLOWED_IMAGE_TYPES
    ):
        errors.add(field, "The image must be a file of type: jpeg, png, jpg, webp.")

    if upload_size(upload) > config.MAX_IMAGE_SIZE_KB * 1024:
        errors.add(field, f"The image may not be greater than {config.MAX_IMAGE_SIZE_KB} kilobytes.")


def check_product_name(errors: FormErrors, value: str, field: str = "name") -> None:
    if not value:
        errors.add(field, "The product name is required.")
    elif len(value) > 50:
        errors.add(field, "The product name may not be longer than 50 characters.")


def check_price(errors: FormErrors, value: str, field: str = "price") -> Optional[Decimal]:
    """
    Validate a price and return it rounded to cents.

    Returns:
        The price as a Decimal, or None if it failed validation
    """
    if not value:
        errors.add(field, "The price is required.")
        return None
    if not PRICE_PATTERN.fullmatch(value):
        errors.add(field, "The price must be a number.")
        return None
    price = Decimal(value)
    if price < MIN_PRICE:
        errors.add(field, "The price must be at least 0.01.")
        return None
    if price > MAX_PRICE:
        errors.add(field, "The price may not be greater than 5000.00.")
        return None
    return price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def check_category(errors: FormErrors, value: str, field: str = "category") -> None:
    if not value:
        errors.add(field, "The category is required.")
    elif value not in Category.values():
        errors.add(field, "The selected category is invalid.")


def check_search_term(errors: FormErrors, value: str, field: str = "term") -> None:
    if len(value) > 100:
        errors.add(field, "The search term may not be longer than 100 characters.")
