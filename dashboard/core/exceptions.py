from fastapi import Request
from fastapi.responses import JSONResponse


class DashboardError(Exception):
    """Base exception for dashboard errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 500,
        details: dict | None = None,
    ):
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        result = {
            "error": {
                "code": self.code,
                "message": self.message,
                "status": self.status,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class FetchFailureError(DashboardError):
    def __init__(self, message: str = "Failed to load connectivity history.", details: dict | None = None):
        super().__init__(
            code="fetch_failed",
            message=message,
            status=502,
            details=details or {"suggestion": "The history backend may be unreachable. Try again shortly."},
        )


class InvalidWindowError(DashboardError):
    def __init__(self, message: str = "Please enter a valid time range.", details: dict | None = None):
        super().__init__(code="invalid_window", message=message, status=422, details=details)


class NotFoundError(DashboardError):
    def __init__(self, message: str = "Resource not found.", details: dict | None = None):
        super().__init__(code="not_found", message=message, status=404, details=details)


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    """Global exception handler for DashboardError and subclasses."""
    return JSONResponse(status_code=exc.status, content=exc.to_dict())
