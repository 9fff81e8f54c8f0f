class RuleAdminError(Exception):
    """Base class for all rule-admin domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except RuleAdminError`` clause can catch any domain error.
    ``error_type`` is the machine-readable slug returned to API clients.
    """

    error_type = "error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class ValidationError(RuleAdminError):
    """Raised when input is missing or malformed."""

    error_type = "validation_error"

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(detail)


class AuthorizationError(RuleAdminError):
    """Raised when a request carries no usable session."""

    error_type = "not_authenticated"

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class NotAuthenticatedError(AuthorizationError):
    """Raised when the session cookie is missing, unknown, or expired."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class InvalidCredentialsError(AuthorizationError):
    """Raised when an email/password pair does not match a user."""

    error_type = "invalid_credentials"

    def __init__(self, detail: str = "Incorrect email or password"):
        super().__init__(detail)


class NotFoundError(RuleAdminError):
    """Raised when a requested record does not exist."""

    error_type = "not_found"

    def __init__(self, detail: str = "Not found"):
        super().__init__(detail)


class RuleNotFoundError(NotFoundError):
    """Raised when no latest version exists for an event name."""

    error_type = "rule_not_found"

    def __init__(self, detail: str = "Rule not found"):
        super().__init__(detail)


class ConflictError(RuleAdminError):
    """Raised when a write collides with existing state."""

    error_type = "conflict"
    retryable = False

    def __init__(self, detail: str = "Conflict"):
        super().__init__(detail)


class RuleAlreadyExistsError(ConflictError):
    """Raised when creating a rule whose event name already has a chain."""

    error_type = "rule_already_exists"

    def __init__(self, detail: str = "A rule with this eventName already exists"):
        super().__init__(detail)


class FrozenVersionError(ConflictError):
    """Raised when a historical (non-latest) version would be mutated.

    Closed versions are immutable; only the latest record of a chain may
    change its active state.
    """

    error_type = "frozen_version"

    def __init__(self, detail: str = "Historical rule versions cannot be modified"):
        super().__init__(detail)


class ConcurrentRuleUpdateError(ConflictError):
    """Raised when another writer changed the rule chain first.

    The transaction has been rolled back in full, so the caller may simply
    retry the request against the new latest version.
    """

    error_type = "concurrent_update"
    retryable = True

    def __init__(
        self, detail: str = "The rule was modified concurrently, please retry"
    ):
        super().__init__(detail)


class EmailAlreadyRegisteredError(ConflictError):
    """Raised on sign-up with an email that already has an account."""

    error_type = "email_already_registered"

    def __init__(self, detail: str = "An account with that email already exists"):
        super().__init__(detail)


class StorageError(RuleAdminError):
    """Raised when the database rejects or loses a unit of work.

    The transaction is always rolled back before this propagates.
    """

    error_type = "storage_error"

    def __init__(self, detail: str = "Storage unavailable"):
        super().__init__(detail)
