import platform
from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter

from app.settings import settings
from app.utils.dates import dt_to_iso, now

router = APIRouter(tags=["meta"])

STARTED_AT = now()


def app_version() -> str:
    try:
        return version(settings.PROJECT_NAME)
    except PackageNotFoundError:
        return "0.0.0+local"


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


@router.get("/meta")
def get_meta():
    return {
        "app_name": settings.PROJECT_NAME,
        "version": app_version(),
        "started_at": dt_to_iso(STARTED_AT),
        "python_version": platform.python_version(),
        "environment": settings.ENV,
        "models": {
            "transcription": settings.TRANSCRIPTION_MODEL,
            "extraction": settings.EXTRACTION_MODEL,
        },
    }
