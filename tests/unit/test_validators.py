"""
Unit tests for form validation.
"""

from decimal import Decimal

import pytest

from marketplace import validators
from marketplace.errors import ValidationError


@pytest.fixture
def errors():
    return validators.FormErrors()


class TestPersonName:

    @pytest.mark.parametrize("name", ["Ana Silva", "José Conceição", "Zoë"])
    def test_accepts_unicode_letters_and_spaces(self, errors, name):
        validators.check_person_name(errors, name)
        assert not errors

    @pytest.mark.parametrize("name", ["Ana123", "ana_silva", "Ana-Silva", "R2D2"])
    def test_rejects_other_characters(self, errors, name):
        validators.check_person_name(errors, name)
        assert "name" in errors

    def test_required(self, errors):
        validators.check_person_name(errors, "")
        assert errors.errors["name"] == ["The name is required."]

    def test_max_length(self, errors):
        validators.check_person_name(errors, "a" * 101)
        assert "name" in errors

        ok = validators.FormErrors()
        validators.check_person_name(ok, "a" * 100)
        assert not ok


class TestEmailAndPassword:

    def test_invalid_email(self, errors):
        validators.check_email(errors, "not-an-email")
        assert "email" in errors

    def test_valid_email(self, errors):
        validators.check_email(errors, "ana@example.com")
        assert not errors

    def test_email_domain_is_normalized(self, errors):
        assert validators.check_email(errors, "Ana@Example.COM") == "Ana@example.com"
        assert not errors

    def test_short_and_unconfirmed_password_reports_both(self, errors):
        validators.check_password(errors, "short", "other")
        assert len(errors.errors["password"]) == 2

    def test_confirmed_password(self, errors):
        validators.check_password(errors, "senha1234", "senha1234")
        assert not errors


class TestImage:

    @pytest.mark.parametrize("filename,content_type", [
        ("a.jpg", "image/jpeg"),
        ("a.jpeg", "image/jpeg"),
        ("a.PNG", "image/png"),
        ("a.webp", "image/webp"),
    ])
    def test_allowed_types(self, errors, upload, filename, content_type):
        validators.check_image(errors, upload(filename, content_type=content_type))
        assert not errors

    def test_gif_rejected(self, errors, upload):
        validators.check_image(errors, upload("anim.gif", content_type="image/gif"))
        assert "image" in errors

    def test_extension_content_type_mismatch_rejected(self, errors, upload):
        validators.check_image(errors, upload("a.jpg", content_type="image/gif"))
        assert "image" in errors

    def test_size_limit(self, errors, upload):
        validators.check_image(errors, upload(content=b"x" * (2048 * 1024)))
        assert not errors

        too_big = validators.FormErrors()
        validators.check_image(too_big, upload(content=b"x" * (2048 * 1024 + 1)))
        assert "image" in too_big
        assert too_big.errors["image"] == ["The image may not be greater than 2048 kilobytes."]

    def test_optional_image_may_be_absent(self, errors):
        validators.check_image(errors, None)
        assert not errors

    def test_required_image(self, errors):
        validators.check_image(errors, None, required=True)
        assert errors.errors["image"] == ["The image is required."]

    def test_empty_filename_counts_as_absent(self, errors, upload):
        validators.check_image(errors, upload(""), required=True)
        assert "image" in errors


class TestProductFields:

    @pytest.mark.parametrize("value,expected", [
        ("0.01", Decimal("0.01")),
        ("3.50", Decimal("3.50")),
        ("5000.00", Decimal("5000.00")),
        ("12", Decimal("12.00")),
    ])
    def test_price_in_range(self, errors, value, expected):
        assert validators.check_price(errors, value) == expected
        assert not errors

    @pytest.mark.parametrize("value", ["0", "0.001", "-1", "5000.01", "abc", "NaN", "Infinity", "", "4_999", "1e3", "+3.50", ".5"])
    def test_price_rejected(self, errors, value):
        assert validators.check_price(errors, value) is None
        assert "price" in errors

    @pytest.mark.parametrize("category", ["Frutas", "Hortaliças", "Verduras", "Legumes", "Outros"])
    def test_known_categories(self, errors, category):
        validators.check_category(errors, category)
        assert not errors

    @pytest.mark.parametrize("category", ["Fruits", "frutas", "Carnes", ""])
    def test_unknown_categories(self, errors, category):
        validators.check_category(errors, category)
        assert "category" in errors

    def test_product_name_length(self, errors):
        validators.check_product_name(errors, "x" * 51)
        assert "name" in errors


class TestFormErrors:

    def test_collects_every_field(self, errors):
        validators.check_product_name(errors, "")
        validators.check_price(errors, "9999")
        validators.check_category(errors, "Carnes")

        with pytest.raises(ValidationError) as exc_info:
            errors.raise_if_any()

        assert set(exc_info.value.errors) == {"name", "price", "category"}
        assert exc_info.value.status_code == 422

    def test_no_errors_does_not_raise(self, errors):
        errors.raise_if_any()
