import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ilaw.config import get_settings
from ilaw.routers import (
    account,
    auth,
    badges,
    books,
    pages,
    progress,
    quiz_attempts,
    settings as settings_routes,
    stats,
    users,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        from ilaw.database import Base, engine
        import ilaw.models  # noqa: F401 - register tables

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")
    yield


app = FastAPI(title="Ilaw ng Bayan API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(books.router)
app.include_router(pages.router)
app.include_router(badges.router)
app.include_router(quiz_attempts.router)
app.include_router(progress.router)
app.include_router(stats.router)
app.include_router(account.router)
app.include_router(settings_routes.router)


@app.get("/")
def root():
    return {"message": "Ilaw ng Bayan API", "docs": "/docs"}


@app.get("/api/health")
def health():
    return {"status": "ok"}
