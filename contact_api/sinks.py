import logging
from typing import Optional

from contact_api.config import Settings, get_settings
from contact_api.schemas import Submission

LOG = logging.getLogger("contact_api.sinks")

SINK_NAMES = ("email", "sheets")


class ContactSink:
    """
    Where a validated submission ends up.

    deliver() must not raise: provider errors are logged and reported as False.
    """
    name = "base"
    unavailable_message = "Submission service is not configured. Please contact us directly."

    @property
    def configured(self) -> bool:
        return False

    def deliver(self, submission: Submission) -> bool:
        raise NotImplementedError


def build_sink(settings: Settings) -> ContactSink:
    from contact_api.email import SesEmailSink
    from contact_api.sheets import SheetsSink

    kind = (settings.CONTACT_SINK or "email").strip().lower()
    if kind not in SINK_NAMES:
        LOG.warning("Unknown CONTACT_SINK '%s'; defaulting to 'email'", kind)
        kind = "email"
    if kind == "sheets":
        return SheetsSink(settings)
    return SesEmailSink(settings)


_sink: Optional[ContactSink] = None

def get_contact_sink() -> ContactSink:
    global _sink
    if _sink is None:
        _sink = build_sink(get_settings())
        LOG.info("Contact sink: %s (configured=%s)", _sink.name, _sink.configured)
    return _sink
