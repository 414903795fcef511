"""
photos.py
Damage-photo batches from the contact form.

A batch is validated as a whole (all or nothing), then every file is handed
to one store:
- S3PhotoStore     : public object URL (needs bucket + key pair)
- LocalPhotoStore  : file under UPLOAD_DIR, served at UPLOAD_URL_PREFIX
- InlinePhotoStore : base64 data URL, nothing persisted
"""

import asyncio
import base64
import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from starlette.concurrency import run_in_threadpool

from contact_api.config import Settings, get_settings
from contact_api.utils import s3

LOG = logging.getLogger("contact_api.photos")

ALLOWED_TYPES = {"image/jpeg": "jpg", "image/png": "png"}
MAX_PHOTOS = 5
MAX_PHOTO_BYTES = 5 * 1024 * 1024

NO_FILES = "No files provided"
TOO_MANY_FILES = "Maximum 5 photos allowed"
BAD_FILE = "Only JPG/PNG files under 5MB allowed"


class PhotoValidationError(ValueError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class PhotoFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def ext(self) -> str:
        return ALLOWED_TYPES.get(self.content_type, "bin")

    def is_acceptable(self) -> bool:
        return self.content_type in ALLOWED_TYPES and self.size <= MAX_PHOTO_BYTES


def check_count(count: int) -> None:
    if count == 0:
        raise PhotoValidationError(NO_FILES)
    if count > MAX_PHOTOS:
        raise PhotoValidationError(TOO_MANY_FILES)


def validate_batch(files: Sequence[PhotoFile]) -> None:
    """Reject the whole batch if it is empty, too large, or holds one bad file."""
    check_count(len(files))
    if not all(f.is_acceptable() for f in files):
        raise PhotoValidationError(BAD_FILE)


def object_name(stamp_ms: int, index: int) -> str:
    return f"contact_{stamp_ms}_{index}"


class PhotoStore:
    name = "base"

    def store(self, photo: PhotoFile, index: int, stamp_ms: int) -> str:
        raise NotImplementedError


class S3PhotoStore(PhotoStore):
    name = "s3"

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._client = client

    def store(self, photo: PhotoFile, index: int, stamp_ms: int) -> str:
        s = self.settings
        key = f"{s.MEDIA_PREFIX.strip('/')}/{object_name(stamp_ms, index)}.{photo.ext}"
        s3.upload_bytes(self._client or s3.client(s), s.MEDIA_BUCKET, key, photo.data, content_type=photo.content_type)
        LOG.info("Uploaded %s (%d bytes) to s3://%s/%s", photo.filename, photo.size, s.MEDIA_BUCKET, key)
        return s3.public_url(s.MEDIA_BUCKET, s.AWS_REGION, key)


class LocalPhotoStore(PhotoStore):
    name = "local"

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def store(self, photo: PhotoFile, index: int, stamp_ms: int) -> str:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        fname = f"{object_name(stamp_ms, index)}.{photo.ext}"
        try:
            with open(self.upload_dir / fname, "xb") as fh:
                fh.write(photo.data)
        except FileExistsError:
            # another batch landed in the same millisecond
            fname = f"{object_name(stamp_ms, index)}_{uuid.uuid4().hex[:8]}.{photo.ext}"
            with open(self.upload_dir / fname, "xb") as fh:
                fh.write(photo.data)
        LOG.info("Saved %s to %s", photo.filename, self.upload_dir / fname)
        return f"{self.url_prefix}/{fname}"


class InlinePhotoStore(PhotoStore):
    name = "inline"

    def store(self, photo: PhotoFile, index: int, stamp_ms: int) -> str:
        encoded = base64.b64encode(photo.data).decode("ascii")
        return f"data:{photo.content_type};base64,{encoded}"


def build_photo_store(settings: Settings) -> PhotoStore:
    mode = (settings.PHOTO_STORAGE or "auto").strip().lower()
    if mode == "inline":
        return InlinePhotoStore()
    if mode != "auto":
        LOG.warning("Unknown PHOTO_STORAGE '%s'; defaulting to 'auto'", mode)
    if settings.s3_configured:
        return S3PhotoStore(settings)
    LOG.info("S3 credentials not set; photos go to local dir %s", settings.UPLOAD_DIR)
    return LocalPhotoStore(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)


async def store_all(store: PhotoStore, photos: Sequence[PhotoFile]) -> List[str]:
    """One thread-pool upload per file; the first failure fails the batch."""
    stamp_ms = int(time.time() * 1000)
    urls = await asyncio.gather(
        *(run_in_threadpool(store.store, p, i, stamp_ms) for i, p in enumerate(photos))
    )
    return list(urls)


_store: Optional[PhotoStore] = None

def get_photo_store() -> PhotoStore:
    global _store
    if _store is None:
        _store = build_photo_store(get_settings())
    return _store
