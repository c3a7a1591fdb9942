from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.requests import Request
from hr_loans.api.auth_routes import router as auth_router
from hr_loans.api.admin_routes import router as admin_router
from hr_loans.api.loan_routes import router as loan_router
from hr_loans.api.notification_routes import router as notification_router
from contextlib import asynccontextmanager
from hr_loans.database.connection import init_db
from hr_loans.core.config import settings, _mask_secret
from hr_loans.core.exceptions import LoanServiceError
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
import logging
import traceback


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all non-OPTIONS API responses.

    OPTIONS requests are left to CORSMiddleware so preflight responses keep
    their Access-Control-* headers.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response


logger = logging.getLogger("server_exception_handler")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"JWT secret loaded: {_mask_secret(settings.JWT_SECRET_KEY)}")
    await init_db()
    yield

app = FastAPI(
    title="Employee Loan Management",
    description="Salary advance requests with two-step HR approval",
    version="1.0.0",
    lifespan=lifespan
)


def _error_body(code: str, message, status_code: int, details=None) -> dict:
    body = {"error": {"code": code, "message": message, "status_code": status_code}}
    if details is not None:
        body["error"]["details"] = details
    return body


@app.exception_handler(LoanServiceError)
async def loan_service_exception_handler(request: Request, exc: LoanServiceError):
    logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.message, exc.status_code),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTPException handled: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("http_error", str(exc.detail) if exc.detail else exc.status_code, exc.status_code),
        headers=getattr(exc, "headers", None),
    )


def jsonable_errors(exc: RequestValidationError):
    return [{k: str(v) if k == "ctx" else v for k, v in err.items()} for err in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content=_error_body("validation_error", "Request validation failed", 422, details=jsonable_errors(exc)),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Catch-all for unexpected exceptions; log the traceback, return a generic body
    tb = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{tb}")
    return JSONResponse(
        status_code=500,
        content=_error_body("internal_server_error", "An unexpected error occurred", 500),
    )

raw_origins = settings.CLIENT_URL or ""
allowed_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

# Middleware runs LIFO: CORS is added last so it handles preflight first
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    expose_headers=["Content-Type", "Content-Disposition"],
    max_age=3600,
)

# Include routers
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(loan_router)
app.include_router(notification_router)

@app.get("/")
async def root():
    return {"message": "Employee Loan Management API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": "API is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("hr_loans.main:app", host="0.0.0.0", port=8000, reload=True)
