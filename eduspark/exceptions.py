class DomainError(Exception):
    """Base exception class for all domain-specific exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ResourceNotFoundError(DomainError):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message)


class ValidationError(DomainError):
    """Exception raised when validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class DuplicateSubmissionError(DomainError):
    """The caller already has a submission for this assignment or challenge."""

    def __init__(self, target_type: str, target_id: str) -> None:
        self.target_type = target_type
        self.target_id = target_id
        super().__init__(f"You have already submitted this {target_type}.")


class StorageFailureError(DomainError):
    """A transaction could not be committed and was rolled back.

    The operations that raise it are idempotent, so callers may retry.
    """

    retryable = True


class OracleUnavailableError(DomainError):
    """An AI-backed oracle failed or timed out.

    ``retryable`` is false when the model is misconfigured or keeps answering
    in the wrong shape, so asking again right away will not help.
    """

    def __init__(self, oracle: str, message: str = "An AI error occurred.", *, retryable: bool = True) -> None:
        self.oracle = oracle
        self.retryable = retryable
        super().__init__(message)
