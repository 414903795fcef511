import base64

import pytest

from contact_api.photos import (
    BAD_FILE,
    MAX_PHOTO_BYTES,
    NO_FILES,
    TOO_MANY_FILES,
    InlinePhotoStore,
    LocalPhotoStore,
    PhotoFile,
    PhotoStore,
    PhotoValidationError,
    S3PhotoStore,
    build_photo_store,
    get_photo_store,
    validate_batch,
)
from contact_api.main import app

from conftest import make_settings

URL = "/api/upload-photos"

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"
PNG = b"\x89PNG\r\n\x1a\nfake-png"


def _jpeg(name="car.jpg", data=JPEG):
    return PhotoFile(filename=name, content_type="image/jpeg", data=data)


class FakeS3:
    def __init__(self):
        self.puts = []

    def put_object(self, **kwargs):
        self.puts.append(kwargs)


class BrokenStore(PhotoStore):
    name = "broken"

    def store(self, photo, index, stamp_ms):
        if index == 1:
            raise OSError("disk full")
        return f"/uploads/{index}"


def test_validate_batch_rejects_empty():
    with pytest.raises(PhotoValidationError) as excinfo:
        validate_batch([])
    assert excinfo.value.message == NO_FILES


def test_six_valid_files_rejected():
    with pytest.raises(PhotoValidationError) as excinfo:
        validate_batch([_jpeg() for _ in range(6)])
    assert excinfo.value.message == TOO_MANY_FILES


def test_one_pdf_fails_whole_batch():
    batch = [_jpeg() for _ in range(4)] + [PhotoFile("estimate.pdf", "application/pdf", b"%PDF-1.4")]
    with pytest.raises(PhotoValidationError) as excinfo:
        validate_batch(batch)
    assert excinfo.value.message == BAD_FILE


def test_size_limit_is_inclusive():
    validate_batch([_jpeg(data=b"x" * MAX_PHOTO_BYTES)])
    with pytest.raises(PhotoValidationError):
        validate_batch([_jpeg(data=b"x" * (MAX_PHOTO_BYTES + 1))])


def test_inline_store_returns_data_url():
    url = InlinePhotoStore().store(PhotoFile("a.png", "image/png", PNG), 0, 1)
    assert url == "data:image/png;base64," + base64.b64encode(PNG).decode()


def test_local_store_creates_dir_and_writes_file(tmp_path):
    upload_dir = tmp_path / "uploads"
    store = LocalPhotoStore(str(upload_dir), "/uploads/")
    url = store.store(_jpeg(), 2, 1700000000000)
    assert url == "/uploads/contact_1700000000000_2.jpg"
    assert (upload_dir / "contact_1700000000000_2.jpg").read_bytes() == JPEG


def test_s3_store_puts_object_under_prefix():
    s3 = FakeS3()
    settings = make_settings(MEDIA_BUCKET="whittico-media", AWS_REGION="us-east-2", MEDIA_PREFIX="contact-photos")
    url = S3PhotoStore(settings, client=s3).store(PhotoFile("a.png", "image/png", PNG), 0, 123)
    assert url == "https://whittico-media.s3.us-east-2.amazonaws.com/contact-photos/contact_123_0.png"
    assert s3.puts == [{
        "Bucket": "whittico-media",
        "Key": "contact-photos/contact_123_0.png",
        "Body": PNG,
        "ContentType": "image/png",
    }]


def test_build_photo_store_choices(tmp_path):
    assert isinstance(build_photo_store(make_settings(PHOTO_STORAGE="inline")), InlinePhotoStore)

    local = build_photo_store(make_settings(PHOTO_STORAGE="auto", MEDIA_BUCKET="", UPLOAD_DIR=str(tmp_path)))
    assert isinstance(local, LocalPhotoStore)

    s3 = build_photo_store(make_settings(
        PHOTO_STORAGE="auto", MEDIA_BUCKET="b", AWS_ACCESS_KEY_ID="AKIA", AWS_SECRET_ACCESS_KEY="secret",
    ))
    assert isinstance(s3, S3PhotoStore)


def test_upload_endpoint_returns_urls(client):
    files = [
        ("photos", ("front.jpg", JPEG, "image/jpeg")),
        ("photos", ("rear.png", PNG, "image/png")),
    ]
    resp = client.post(URL, files=files)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert body["photoUrls"][0].startswith("data:image/jpeg;base64,")
    assert body["photoUrls"][1].startswith("data:image/png;base64,")


def test_upload_endpoint_no_files(client):
    resp = client.post(URL, data={"note": "no photos"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No files provided"}


def test_upload_endpoint_too_many(client):
    files = [("photos", (f"{i}.jpg", JPEG, "image/jpeg")) for i in range(6)]
    resp = client.post(URL, files=files)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Maximum 5 photos allowed"}


def test_upload_endpoint_all_or_nothing(client):
    files = [("photos", (f"{i}.jpg", JPEG, "image/jpeg")) for i in range(4)]
    files.append(("photos", ("estimate.pdf", b"%PDF-1.4", "application/pdf")))
    resp = client.post(URL, files=files)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Only JPG/PNG files under 5MB allowed"}


def test_upload_endpoint_local_fallback(client, tmp_path):
    store = LocalPhotoStore(str(tmp_path / "uploads"))
    app.dependency_overrides[get_photo_store] = lambda: store
    resp = client.post(URL, files=[("photos", ("front.jpg", JPEG, "image/jpeg"))])
    assert resp.status_code == 200
    url = resp.json()["photoUrls"][0]
    assert url.startswith("/uploads/contact_") and url.endswith("_0.jpg")
    assert (tmp_path / "uploads" / url.rsplit("/", 1)[1]).exists()


def test_upload_endpoint_store_failure_fails_request(client):
    app.dependency_overrides[get_photo_store] = lambda: BrokenStore()
    files = [("photos", (f"{i}.jpg", JPEG, "image/jpeg")) for i in range(3)]
    resp = client.post(URL, files=files)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to upload photos"}


def test_local_store_same_millisecond_does_not_overwrite(tmp_path):
    store = LocalPhotoStore(str(tmp_path), "/uploads")
    first = store.store(_jpeg(data=b"first"), 0, 42)
    second = store.store(_jpeg(data=b"second"), 0, 42)
    assert first == "/uploads/contact_42_0.jpg"
    assert second != first
    assert second.startswith("/uploads/contact_42_0_") and second.endswith(".jpg")
    assert (tmp_path / "contact_42_0.jpg").read_bytes() == b"first"
    assert (tmp_path / second.rsplit("/", 1)[1]).read_bytes() == b"second"


def test_upload_endpoint_rejects_oversized_file(client):
    files = [
        ("photos", ("front.jpg", JPEG, "image/jpeg")),
        ("photos", ("huge.jpg", b"x" * (MAX_PHOTO_BYTES + 1), "image/jpeg")),
    ]
    resp = client.post(URL, files=files)
    assert resp.status_code == 400
    assert resp.json() == {"error": BAD_FILE}


def test_missing_upload_returns_404_not_500(client):
    resp = client.get("/uploads/contact_1_0.jpg")
    assert resp.status_code == 404
