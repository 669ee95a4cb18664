class DomainError(Exception):
    """Base class for rule violations; controllers flash or return the message as-is."""


class ValidationError(DomainError):
    """Bad form input, or a request the record's state does not allow (e.g. a second exit)."""


class AuthenticationError(DomainError):
    """Wrong credentials or a disabled account at login."""


class AuthorizationError(DomainError):
    """The signed-in role may not perform the action."""


class NotFoundError(DomainError):
    """Unknown account, parking record or image."""
