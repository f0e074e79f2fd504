import logging
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import Base, engine
from app.logging_config import setup_logging
from app.models import admin, admin_request, donor, form, notice, user  # noqa: F401  (register tables)
from app.routers import (
    admin_donors,
    admin_forms,
    admin_notices,
    admin_requests,
    admins,
    donors,
    forms,
    health,
    notices,
    users,
)
from app.utils.response import create_response, handle_exception
from seed import run_seed

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# Auto create tables
Base.metadata.create_all(bind=engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = uuid.uuid4().hex[:12]
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "%s %s %s %s %.1fms",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return handle_exception(exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return create_response(
        message="Validation error",
        data={"errors": errors},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


@app.on_event("startup")
async def startup_event():
    run_seed()


# Add routes
app.include_router(health.router)
app.include_router(users.router)
app.include_router(admins.router, prefix="/api/admin")
app.include_router(admins.router, prefix="/api/admins")
app.include_router(admin_requests.router)
app.include_router(donors.router)
app.include_router(admin_donors.router)
app.include_router(notices.router)
app.include_router(admin_notices.router)
app.include_router(forms.router)
app.include_router(admin_forms.router)


@app.get("/")
def home():
    try:
        return create_response(
            message="Blood donation camp API running",
            data={"service": "blood-camp-backend"},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)
