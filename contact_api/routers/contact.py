import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from contact_api.rate_limit import SlidingWindowRateLimiter, get_rate_limiter
from contact_api.schemas import ContactForm, ContactResponse, Submission
from contact_api.sinks import ContactSink, get_contact_sink
from contact_api.validation import check_required

LOG = logging.getLogger("contact_api.routers.contact")

router = APIRouter(prefix="/api", tags=["contact"])

RATE_LIMITED = "Too many submissions. Please wait before submitting again."
SUBMIT_FAILED = "Failed to submit form. Please try again."
INTERNAL_ERROR = "Internal server error"
THANK_YOU = "Thank you for your submission. We'll get back to you within 24 hours!"


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, else X-Real-IP, else "unknown"."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return (request.headers.get("X-Real-IP") or "").strip() or "unknown"


@router.post("/submit-contact", response_model=ContactResponse)
async def submit_contact(
    request: Request,
    sink: ContactSink = Depends(get_contact_sink),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
):
    # config check runs before rate limiting, for every sink
    if not sink.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=sink.unavailable_message)

    try:
        ip = get_client_ip(request)
        if limiter.is_rate_limited(ip):
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=RATE_LIMITED)

        form = ContactForm.model_validate(await request.json())
        problem = check_required(form.name, form.message, form.email, form.phone)
        if problem:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

        submission = Submission.from_form(form, ip)
        delivered = await run_in_threadpool(sink.deliver, submission)
    except HTTPException:
        raise
    except Exception:
        LOG.exception("Contact form submission failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR)

    if not delivered:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=SUBMIT_FAILED)

    LOG.info("Contact submission from %s (%s) delivered via %s", submission.name, ip, sink.name)
    return ContactResponse(success=True, message=THANK_YOU)
