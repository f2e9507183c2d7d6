"""
Checkout form validation

Every validator returns None when the value is acceptable, otherwise a
message for the shopper. Invalid input never raises.
"""
import re
from typing import Optional

from storefront.models import CheckoutFormData, CHECKOUT_FIELDS

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")
NON_DIGIT = re.compile(r"[^0-9]")

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JS_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE | re.ASCII)


def _digits(value: str) -> str:
    return NON_DIGIT.sub("", value)


def validate_required(value: str, field_name: str) -> Optional[str]:
    if not value.strip():
        return f"{field_name} is required"
    return None


def validate_phone(phone: str) -> Optional[str]:
    """Indian mobile number: 10 digits starting with 6-9"""
    trimmed = phone.strip()
    if not trimmed:
        return "Phone number is required"

    digits = _digits(trimmed)
    if len(digits) != 10:
        return "Phone number must be exactly 10 digits"
    if digits[0] not in "6789":
        return "Phone number must start with 6, 7, 8, or 9"
    return None


def validate_pincode(pincode: str) -> Optional[str]:
    trimmed = pincode.strip()
    if not trimmed:
        return "Pincode is required"
    if len(_digits(trimmed)) != 6:
        return "Pincode must be exactly 6 digits"
    return None


def validate_full_name(name: str) -> Optional[str]:
    trimmed = name.strip()
    if not trimmed:
        return "Full name is required"
    if len(trimmed) < 2:
        return "Full name must be at least 2 characters"
    if not NAME_PATTERN.match(trimmed):
        return "Full name can only contain letters and spaces"
    return None


def validate_address(address: str) -> Optional[str]:
    trimmed = address.strip()
    if not trimmed:
        return "Address is required"
    if len(trimmed) < 10:
        return "Address must be at least 10 characters"
    return None


def validate_email(email: str) -> Optional[str]:
    trimmed = email.strip()
    if not trimmed:
        return "Email is required"
    if not EMAIL_PATTERN.match(trimmed):
        return "Please enter a valid email address"
    return None


def validate_landmark(landmark: str) -> Optional[str]:
    """Optional field; only checked when filled in"""
    trimmed = landmark.strip()
    if trimmed and len(trimmed) < 2:
        return "Landmark must be at least 2 characters"
    return None


def sanitize_input(value: str) -> str:
    """Strip angle brackets, javascript: and inline on*= handlers.

    Not an HTML sanitizer, only removes the obviously dangerous fragments.
    """
    value = _ANGLE_BRACKETS.sub("", value)
    value = _JS_SCHEME.sub("", value)
    return _EVENT_HANDLER.sub("", value)


def sanitize_form_data(data: CheckoutFormData) -> CheckoutFormData:
    return CheckoutFormData(**{
        field: sanitize_input(getattr(data, field)) for field in CHECKOUT_FIELDS
    })


FIELD_VALIDATORS = {
    "full_name": validate_full_name,
    "email": validate_email,
    "phone_number": validate_phone,
    "address": validate_address,
    "landmark": validate_landmark,
    "pincode": validate_pincode,
}


def validate_checkout_form(data: CheckoutFormData) -> dict[str, str]:
    """Run all field validators, return only the failing fields"""
    errors = {}
    for field, validator in FIELD_VALIDATORS.items():
        error = validator(getattr(data, field))
        if error:
            errors[field] = error
    return errors


def has_validation_errors(errors: dict[str, Optional[str]]) -> bool:
    return any(error is not None for error in errors.values())


def format_phone_number(phone: str) -> str:
    """98765 43210"""
    digits = _digits(phone)
    if len(digits) == 10:
        return f"{digits[:5]} {digits[5:]}"
    return phone


def format_pincode(pincode: str) -> str:
    """560 001"""
    digits = _digits(pincode)
    if len(digits) == 6:
        return f"{digits[:3]} {digits[3:]}"
    return pincode
