"""Authentication-specific exceptions."""

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Base authentication error."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class UnauthenticatedError(AuthenticationError):
    """No caller identity on a route that requires one."""

    def __init__(self) -> None:
        super().__init__(detail="Not authenticated.")


class InvalidCredentialsError(AuthenticationError):
    """Invalid credentials provided."""

    def __init__(self) -> None:
        super().__init__(detail="Invalid email or password.")


class TokenExpiredError(AuthenticationError):
    """Session token has expired."""

    def __init__(self) -> None:
        super().__init__(detail="Session has expired")


class InvalidTokenError(AuthenticationError):
    """Session token failed signature or payload validation."""

    def __init__(self) -> None:
        super().__init__(detail="Invalid session")


class AuthorizationError(HTTPException):
    """User is authenticated but lacks permissions."""

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UserAlreadyExistsError(HTTPException):
    """User already exists."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail="A user with this email already exists.")
