import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from contact_api.config import get_settings

from contact_api.routers.meta     import router as meta_router
from contact_api.routers.contact  import router as contact_router
from contact_api.routers.photos   import router as photos_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

s = get_settings()
app = FastAPI(title=s.APP_TITLE)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o).rstrip("/") for o in s.CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Errors go out as {"error": "..."}, the shape the site's forms read."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=getattr(exc, "headers", None))

app.include_router(meta_router)
app.include_router(contact_router)
app.include_router(photos_router)

# Local-disk photo fallback; StaticFiles errors on a missing directory
Path(s.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(s.UPLOAD_URL_PREFIX, StaticFiles(directory=s.UPLOAD_DIR, check_dir=False), name="uploads")

@app.get("/", tags=["root"])
def read_root():
    return {"message": "Welcome to the Whittico's Collision contact API"}
