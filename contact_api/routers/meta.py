from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from contact_api.photos import PhotoStore, get_photo_store
from contact_api.sinks import ContactSink, get_contact_sink

router = APIRouter(prefix="/api", tags=["meta"])

@router.get("/health")
def health(sink: ContactSink = Depends(get_contact_sink), store: PhotoStore = Depends(get_photo_store)):
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "sink": sink.name,
        "sink_configured": sink.configured,
        "photo_storage": store.name,
    }
