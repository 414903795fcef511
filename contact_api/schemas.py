from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from contact_api.validation import sanitize, FIELD_LIMITS, EXTRA_FIELD_LIMIT

# Optional partner/claim fields, in display and email order
OPTIONAL_FIELDS: List[Tuple[str, str]] = [
    ("company_name", "Company"),
    ("contact_role", "Role"),
    ("fleet_size", "Fleet Size"),
    ("adjuster_contact", "Adjuster Contact"),
    ("vehicle", "Vehicle"),
    ("insurer", "Insurance Company"),
    ("claim_number", "Claim Number"),
    ("photo_count", "Photos"),
]

DEFAULT_SOURCE = "website"
DEFAULT_SUBJECT = "Contact Form Submission"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ContactForm(BaseModel):
    """Raw JSON body of a contact form post. Everything is optional here; presence is checked later."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True,
                              extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    service: Optional[str] = None   # the homepage form posts "service" instead of "subject"
    message: Optional[str] = None
    source: Optional[str] = None
    user_agent: Optional[str] = None

    company_name: Optional[str] = None
    contact_role: Optional[str] = None
    fleet_size: Optional[str] = None
    adjuster_contact: Optional[str] = None
    vehicle: Optional[str] = None
    insurer: Optional[str] = None
    claim_number: Optional[str] = None
    photo_count: Optional[str] = None
    photo_urls: Optional[List[str]] = None

    @field_validator("photo_urls", mode="before")
    @classmethod
    def coerce_photo_urls(cls, v):
        """A lone URL becomes a one-item list; anything else that is not a list of strings is dropped."""
        if isinstance(v, str):
            return [v]
        if not isinstance(v, list):
            return None
        return [u for u in v if isinstance(u, str)]


class Submission(BaseModel):
    timestamp: str
    source: str = DEFAULT_SOURCE
    name: str
    email: str = ""
    phone: str = ""
    subject: str = DEFAULT_SUBJECT
    message: str
    ip: str = "unknown"
    user_agent: str = ""
    extras: Dict[str, str] = Field(default_factory=dict)
    photo_urls: List[str] = Field(default_factory=list)

    @classmethod
    def from_form(cls, form: ContactForm, ip: str, timestamp: Optional[str] = None) -> "Submission":
        extras: Dict[str, str] = {}
        for key, _label in OPTIONAL_FIELDS:
            value = sanitize(getattr(form, key), EXTRA_FIELD_LIMIT)
            if value:
                extras[key] = value
        return cls(
            timestamp=timestamp or utc_timestamp(),
            source=sanitize(form.source or DEFAULT_SOURCE, FIELD_LIMITS["source"]),
            name=sanitize(form.name, FIELD_LIMITS["name"]),
            email=sanitize(form.email, FIELD_LIMITS["email"]),
            phone=sanitize(form.phone, FIELD_LIMITS["phone"]),
            subject=sanitize(form.subject or form.service or DEFAULT_SUBJECT, FIELD_LIMITS["subject"]),
            message=sanitize(form.message, FIELD_LIMITS["message"]),
            ip=ip,
            user_agent=sanitize(form.user_agent, FIELD_LIMITS["user_agent"]),
            extras=extras,
            photo_urls=[u.strip() for u in (form.photo_urls or []) if u and u.strip()],
        )

    def present_extras(self) -> List[Tuple[str, str, str]]:
        """(key, label, value) for each optional field that was filled in."""
        return [(key, label, self.extras[key]) for key, label in OPTIONAL_FIELDS if self.extras.get(key)]


class ContactResponse(BaseModel):
    success: bool
    message: str


class PhotoUploadResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    photo_urls: List[str]
    count: int
