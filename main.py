# main.py (crew management API)
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import Base, engine
from routers.v1 import api_v1
from services.movement_service import MovementError
from utils.envelope import fail

import models  # noqa: F401  register tables on Base.metadata

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ------------------------------
# App bootstrap
# ------------------------------
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.app_title, version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------
# Errors -> {success: false, data: null, message}
# ------------------------------
def validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    msg = str(first.get("msg", "Invalid request"))
    # "Value error, Mobile number must ..." -> "Mobile number must ..."
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    if loc and first.get("type") != "value_error":
        return f"{'.'.join(loc)}: {msg}"
    return msg


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail)), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    message = validation_message(exc)
    logger.info("validation failed on %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=422, content=fail(message))


@app.exception_handler(MovementError)
async def movement_error(request: Request, exc: MovementError):
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message))


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")


app.include_router(api_v1, prefix=settings.api_prefix)
