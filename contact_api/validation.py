import re
from typing import Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_MAX_LENGTH = 2000

# Per-field clip lengths
FIELD_LIMITS = {
    "source": 50,
    "name": 100,
    "email": 100,
    "phone": 20,
    "subject": 200,
    "message": 2000,
    "user_agent": 500,
}
EXTRA_FIELD_LIMIT = 200

NAME_AND_MESSAGE_REQUIRED = "Name and message are required"
EMAIL_OR_PHONE_REQUIRED = "Either email or phone is required"
INVALID_EMAIL = "Invalid email format"


def sanitize(text: Optional[str], max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Trim and clip free text. Never fails; re-trims after clipping so it is idempotent."""
    if not text:
        return ""
    return text.strip()[:max_length].rstrip()


def is_valid_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(EMAIL_RE.fullmatch(value))


def check_required(name: Optional[str], message: Optional[str],
                   email: Optional[str], phone: Optional[str]) -> Optional[str]:
    """
    Return the first violation in precedence order, or None.

    Name/message beats email/phone, which beats email shape; a body missing
    everything only reports the first.
    """
    name, message = (name or "").strip(), (message or "").strip()
    email, phone = (email or "").strip(), (phone or "").strip()
    if not name or not message:
        return NAME_AND_MESSAGE_REQUIRED
    if not email and not phone:
        return EMAIL_OR_PHONE_REQUIRED
    if email and not is_valid_email(email):
        return INVALID_EMAIL
    return None
