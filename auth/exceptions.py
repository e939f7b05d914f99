"""Auth exceptions."""


class AuthException(Exception):
    """Base auth exception with HTTP status."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidCredentials(AuthException):
    """Wrong login/password, or an unknown, consumed or expired refresh token."""

    def __init__(self, message: str = "invalid credentials"):
        super().__init__(message, status_code=401)


class InvalidToken(AuthException):
    def __init__(self, message: str = "invalid token"):
        super().__init__(message, status_code=401)


class InvalidHashFormat(AuthException):
    """Stored password hash has an unexpected length."""

    def __init__(self, message: str = "invalid password hash"):
        super().__init__(message, status_code=500)


class UserAlreadyExists(AuthException):
    def __init__(self, message: str = "user already exists"):
        super().__init__(message, status_code=409)


class UserNotFound(AuthException):
    def __init__(self, message: str = "user not found"):
        super().__init__(message, status_code=404)


class TokenNotFound(AuthException):
    def __init__(self, message: str = "refresh token not found"):
        super().__init__(message, status_code=401)


class TokenExpired(AuthException):
    def __init__(self, message: str = "refresh token expired"):
        super().__init__(message, status_code=401)


class StoreError(AuthException):
    """Persistence failure; signals an outage rather than a credential problem."""

    def __init__(self, message: str = "storage failure"):
        super().__init__(message, status_code=500)
