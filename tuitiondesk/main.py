"""
TuitionDesk: tuition center administration backend.
FastAPI entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tuitiondesk.core.config import settings
from tuitiondesk.core.errors import register_exception_handlers
from tuitiondesk.core.log import setup_logging
from tuitiondesk.core.middleware import RequestLoggingMiddleware
from tuitiondesk.routers import (
    announcements, auth, batches, dashboard, payments, staff, standards, student_portal, students, subjects,
    teacher_portal, teachers,
)

setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    description="Students, teachers, staff, batches, announcements and fee payments of a tuition center",
    version="1.0.0",
    debug=settings.ENV == "development",
)

# CORS
app.add_middleware(CORSMiddleware, **settings.cors_options)

# Access log
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router)
app.include_router(standards.router)
app.include_router(subjects.router)
app.include_router(teachers.router)
app.include_router(staff.router)
app.include_router(students.router)
app.include_router(batches.router)
app.include_router(announcements.router)
app.include_router(payments.router)
app.include_router(dashboard.router)
app.include_router(teacher_portal.router)
app.include_router(student_portal.router)


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running",
        "env": settings.ENV,
    }


@app.get("/api/health")
async def health():
    return {"status": "healthy", "env": settings.ENV}
