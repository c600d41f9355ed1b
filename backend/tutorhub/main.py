"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tutorhub.config import settings
from tutorhub.database import Base, engine
from tutorhub.errors import InternalFailure

# Import routers
from tutorhub.routers import users, students, classes, class_requests, notifications

# Import all models so Base.metadata knows about them
from tutorhub.models.user import User                              # noqa: F401
from tutorhub.models.student import Student                        # noqa: F401
from tutorhub.models.school_class import SchoolClass, ClassEnrollment  # noqa: F401
from tutorhub.models.class_request import ClassRequest             # noqa: F401
from tutorhub.models.notification import Notification             # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="TutorHub",
    description="Tutoring class management — student registration, class enrollment requests and admin moderation",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(students.router, prefix="/api/students", tags=["Students"])
app.include_router(classes.router, prefix="/api/classes", tags=["Classes"])
app.include_router(class_requests.router, prefix="/api/class-requests", tags=["ClassRequests"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


@app.exception_handler(SQLAlchemyError)
def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    failure = InternalFailure("Server error")
    return JSONResponse(status_code=failure.status_code, content={"detail": failure.detail})


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
