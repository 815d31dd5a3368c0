"""
Input validation and sanitizing for post submissions
"""
import re
from typing import List, Optional
from helpradar.models.post import Category, Contact, PostCreateRequest, PostUpdateRequest, Urgency

TITLE_MAX_LENGTH = 150
DESCRIPTION_MAX_LENGTH = 2000
MAX_IMAGES = 5

PHONE_PATTERN = re.compile(r"^[+]?[\d\s-]{10,15}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_ESCAPES = [
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
]

def sanitize_text(text: Optional[str]) -> str:
    """Escape HTML-significant characters and trim"""
    if not text:
        return ""
    for char, replacement in _ESCAPES:
        text = text.replace(char, replacement)
    return text.strip()

def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))

def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(phone))

def _check_text(errors: List[str], label: str, value: Optional[str], max_length: int):
    if not value or not value.strip():
        errors.append(f"{label} is required")
    elif len(value) > max_length:
        errors.append(f"{label} cannot exceed {max_length} characters")

def _check_location(errors: List[str], lat: Optional[float], lng: Optional[float]):
    # NaN fails both comparisons as well
    if lat is not None and not -90 <= lat <= 90:
        errors.append("Invalid latitude (must be between -90 and 90)")
    if lng is not None and not -180 <= lng <= 180:
        errors.append("Invalid longitude (must be between -180 and 180)")

def _check_contact(errors: List[str], contact: Optional[Contact]):
    if not contact:
        return
    if contact.phone and not is_valid_phone(contact.phone):
        errors.append("Invalid phone number format")
    if contact.email and not is_valid_email(contact.email):
        errors.append("Invalid email format")

def _check_images(errors: List[str], images: Optional[list]):
    if images and len(images) > MAX_IMAGES:
        errors.append(f"Maximum {MAX_IMAGES} images allowed")

def validate_post_input(data: PostCreateRequest) -> List[str]:
    """Return every validation error found, empty list when valid"""
    errors = []

    _check_text(errors, "Title", data.title, TITLE_MAX_LENGTH)
    _check_text(errors, "Description", data.description, DESCRIPTION_MAX_LENGTH)

    if Category.parse(data.category) is None:
        errors.append("Valid category is required (Help Needed, Item Lost, Blood Needed, or Offer)")

    if not data.city or not data.city.strip():
        errors.append("City is required")

    if data.urgency and Urgency.parse(data.urgency) is None:
        errors.append("Urgency must be Low, Medium, or High")

    _check_location(errors, data.lat, data.lng)
    _check_contact(errors, data.contact)
    _check_images(errors, data.images)

    return errors

def validate_post_update(data: PostUpdateRequest) -> List[str]:
    """
    Same rules as validate_post_input, applied only to the fields the
    request actually sets. A field sent as null counts as set.
    """
    errors = []
    sent = data.model_fields_set

    if "title" in sent:
        _check_text(errors, "Title", data.title, TITLE_MAX_LENGTH)
    if "description" in sent:
        _check_text(errors, "Description", data.description, DESCRIPTION_MAX_LENGTH)

    if "category" in sent and Category.parse(data.category) is None:
        errors.append("Valid category is required (Help Needed, Item Lost, Blood Needed, or Offer)")

    if "city" in sent and (not data.city or not data.city.strip()):
        errors.append("City is required")

    if "urgency" in sent and Urgency.parse(data.urgency) is None:
        errors.append("Urgency must be Low, Medium, or High")

    if (data.lat is None) != (data.lng is None):
        errors.append("Latitude and longitude must be provided together")
    _check_location(errors, data.lat, data.lng)

    _check_contact(errors, data.contact)
    _check_images(errors, data.images)

    return errors
