class AuthenticationError(Exception):
    """No authenticated user where one is required."""


class AccessDeniedError(Exception):
    """The user is authenticated but may not touch the resource."""


class ConflictError(Exception):
    """The write would duplicate an existing record."""
