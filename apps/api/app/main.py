import time

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.api.explain import router as explain_router
from app.api.progress import router as progress_router
from app.api.study_packs import router as study_packs_router
from app.core.errors import StudyPackError
from app.core.logging import configure_logging, log_api_request
from app.db.session import get_db

configure_logging()
logger = structlog.get_logger("app")

app = FastAPI(title="Study Pack Generator API", version="0.1.0")
app.include_router(study_packs_router)
app.include_router(progress_router)
app.include_router(explain_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    t0 = time.time()
    response = await call_next(request)
    log_api_request(request, response.status_code, int((time.time() - t0) * 1000))
    return response


@app.exception_handler(StudyPackError)
async def study_pack_error_handler(request: Request, exc: StudyPackError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        error=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
        **exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(x) for x in first.get("loc", ())[1:]) or None
    logger.info("request_invalid", path=request.url.path, field=field)
    return JSONResponse(
        status_code=400,
        content={"message": first.get("msg", "Invalid request"), "field": field},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request_crashed", path=request.url.path, error=repr(exc))
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    db_ok: bool


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    db_ok = False
    gen = get_db()
    try:
        db: Session = next(gen)
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning("health_db_check_failed", error=str(e))
    finally:
        gen.close()

    return HealthResponse(ok=True, service="api", version=app.version, db_ok=db_ok)
