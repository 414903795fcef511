"""
Whittico's Collision contact intake API

Serverless-style endpoints behind the marketing site:
- POST /api/submit-contact : validate, rate-limit and forward a contact form
- POST /api/upload-photos  : accept up to 5 damage photos (S3, local disk or inline)

Modules:
- config.py     : environment settings (pydantic-settings)
- validation.py : sanitize + field checks
- rate_limit.py : per-IP sliding window, in process memory
- sinks.py      : sink interface + selection (email.py = SES, sheets.py = Google Sheets)
- photos.py     : batch validation + photo stores
- routers/      : FastAPI routes
"""

__version__ = "0.1.0"
