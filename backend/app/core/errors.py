"""
Service-layer exceptions.

Services raise these; the handlers registered in app.main translate them to
HTTP responses, so business code never imports FastAPI.
"""


class ServiceError(Exception):
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.error


class ForbiddenError(ServiceError):
    status_code = 403
    error = "Forbidden"


class BadRequestError(ServiceError):
    status_code = 400
    error = "Bad Request"


class NotFoundError(ServiceError):
    status_code = 404
    error = "Not Found"


class InternalServerError(ServiceError):
    status_code = 500
    error = "Internal Server Error"


class UnauthorizedError(ServiceError):
    status_code = 401
    error = "Unauthorized"


class TooManyRequestsError(ServiceError):
    status_code = 429
    error = "Too Many Requests"
