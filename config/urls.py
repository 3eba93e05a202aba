"""
URL configuration for the task tracker.

All API failures are rendered as {"message": ...}; internal errors are
logged with their traceback and reported without detail.
"""
import logging

from django.contrib import admin
from django.http import HttpRequest
from django.urls import path
from ninja import NinjaAPI
from ninja.errors import HttpError, ValidationError as NinjaValidationError

from apps.core.exceptions import TaskTrackerError, ValidationError

logger = logging.getLogger(__name__)

api = NinjaAPI(
    title="Task Tracker API",
    version="1.0.0",
    description="Personal task tracking: accounts, tasks, filtering and stats",
    docs_url="/docs",
)


@api.exception_handler(TaskTrackerError)
def handle_domain_error(request: HttpRequest, exc: TaskTrackerError):
    body = {"message": exc.message, "error": type(exc).__name__}
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    return api.create_response(request, body, status=exc.status_code)


@api.exception_handler(NinjaValidationError)
def handle_request_validation(request: HttpRequest, exc: NinjaValidationError):
    return api.create_response(
        request,
        {"message": "Invalid request", "error": "ValidationError", "errors": exc.errors},
        status=400,
    )


@api.exception_handler(HttpError)
def handle_http_error(request: HttpRequest, exc: HttpError):
    return api.create_response(request, {"message": str(exc)}, status=exc.status_code)


@api.exception_handler(Exception)
def handle_unexpected(request: HttpRequest, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.path}")
    return api.create_response(request, {"message": "Internal server error"}, status=500)


from apps.identity.api import router as identity_router
from apps.tasks.api import router as tasks_router

api.add_router("/auth", identity_router)
api.add_router("/tasks", tasks_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
