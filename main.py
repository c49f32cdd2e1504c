from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.logging import configure_logging
from app.endpoints import account, admin, course, enrollment, instructor_application, lesson_progress, utility
from app.middleware.exceptions import (
    global_exception_handler,
    http_exception_handler,
    persistence_exception_handler,
    validation_exception_handler,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.services.instructor_application import instructor_application_service

configure_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, persistence_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(utility.router, tags=["Health"])
app.include_router(account.router, prefix="/account", tags=["Account"])
app.include_router(course.router, prefix="/courses", tags=["Courses"])
app.include_router(enrollment.router, prefix="/enrollment", tags=["Enrollment"])
app.include_router(lesson_progress.router, prefix="/progress", tags=["Lesson Progress"])
app.include_router(instructor_application.router, prefix="/instructor-application", tags=["Instructor Application"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])

@app.on_event("shutdown")
async def shutdown_event():
    await instructor_application_service.wait_for_notifications()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
