import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from contact_api.photos import (
    BAD_FILE,
    MAX_PHOTO_BYTES,
    PhotoFile,
    PhotoStore,
    PhotoValidationError,
    check_count,
    get_photo_store,
    store_all,
    validate_batch,
)
from contact_api.schemas import PhotoUploadResponse

LOG = logging.getLogger("contact_api.routers.photos")

router = APIRouter(prefix="/api", tags=["photos"])

UPLOAD_FAILED = "Failed to upload photos"


@router.post("/upload-photos", response_model=PhotoUploadResponse)
async def upload_photos(request: Request, store: PhotoStore = Depends(get_photo_store)):
    """Multipart field `photos`: 1-5 JPG/PNG files, 5MB each."""
    try:
        form = await request.form()
        entries = form.getlist("photos")
        check_count(len(entries))

        photos = []
        for entry in entries:
            if isinstance(entry, str):
                # plain text value in the photos field; fails the type check below
                photos.append(PhotoFile(filename="", content_type="", data=b""))
                continue
            if (entry.size or 0) > MAX_PHOTO_BYTES:
                # don't pull an oversized spool into memory
                raise PhotoValidationError(BAD_FILE)
            photos.append(PhotoFile(
                filename=entry.filename or "",
                content_type=entry.content_type or "",
                data=await entry.read(),
            ))
        validate_batch(photos)

        urls = await store_all(store, photos)
    except PhotoValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception:
        LOG.exception("Photo upload failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=UPLOAD_FAILED)

    LOG.info("Stored %d photo(s) via %s", len(urls), store.name)
    return PhotoUploadResponse(photo_urls=urls, count=len(urls))
