import sys
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import LOG_LEVEL
from app.application.exceptions import ExamServiceError
from app.presentation.api.routers.auth_router import router as auth_router
from app.presentation.api.routers.subject_router import router as subject_router
from app.presentation.api.routers.mcq_router import router as mcq_router
from app.presentation.api.routers.course_router import router as course_router
from app.presentation.api.routers.exam_router import router as exam_router
from app.presentation.api.routers.attempt_router import router as attempt_router
from app.infrastructure.db.session import Base, engine, SessionLocal
from app.infrastructure.db import models  # noqa: F401  registers tables
from app.infrastructure.repositories.user_repository import seed_users

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables and the fixed user list
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_users(db)
    finally:
        db.close()
    yield


# Initialize FastAPI app
app = FastAPI(title="MCQ Exam Manager API", lifespan=lifespan)


@app.exception_handler(ExamServiceError)
async def exam_error_handler(request: Request, exc: ExamServiceError):
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred."}
    )

# Include routers
app.include_router(auth_router)
app.include_router(subject_router)
app.include_router(mcq_router)
app.include_router(course_router)
app.include_router(exam_router)
app.include_router(attempt_router)


# Optional root endpoint
@app.get("/")
def root():
    return {"message": "Welcome to MCQ Exam Manager API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
