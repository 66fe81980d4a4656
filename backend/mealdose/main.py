import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mealdose import __version__
from mealdose.api import api_router
from mealdose.core.exceptions import InvalidDoseInputError
from mealdose.core.logging import configure_logging
from mealdose.core.settings import get_settings

configure_logging()
settings = get_settings()
logger = logging.getLogger(__name__)

app = FastAPI(title="MealDose", version=__version__)


def _collect_cors_origins() -> list[str]:
    default_origins = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    collected: list[str] = []
    for origin in (*default_origins, *settings.security.cors_origins):
        if origin and origin not in collected:
            collected.append(origin)

    return collected


app.add_middleware(
    CORSMiddleware,
    allow_origins=_collect_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(InvalidDoseInputError)
async def invalid_dose_input_handler(request: Request, exc: InvalidDoseInputError) -> JSONResponse:
    logger.info("Rejected dose request on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.on_event("startup")
async def startup_event() -> None:
    data_dir = Path(settings.data.data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Using data directory: %s", data_dir)


@app.get("/", include_in_schema=False)
def root():
    return {"message": "MealDose backend running"}
