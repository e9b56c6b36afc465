"""
Error taxonomy shared by services and routers.

Services raise these; a single exception handler in app.main turns them
into {"error": message} JSON responses with the matching status code.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 422


class AuthError(AppError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class IncorrectPassword(AppError):
    status_code = 422

    def __init__(self, message: str = "Incorrect password"):
        super().__init__(message)


class UserNotFound(AppError):
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class NotFound(AppError):
    status_code = 404


class Forbidden(AppError):
    status_code = 403


class UpstreamError(AppError):
    status_code = 500
