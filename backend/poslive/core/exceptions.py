"""Shared exceptions module."""

from typing import Any, Hashable, Optional


class PosLiveException(Exception):
    """Base exception for poslive services."""

    pass


class SourceSubscribeError(PosLiveException):
    """Exception raised when a subscription source fails to open a subscription."""

    def __init__(self, key: Hashable, message: Optional[str] = "Failed to open subscription"):
        """Create a new SourceSubscribeError instance.

        Args:
        ----
            key (Hashable): The subscription key that could not be opened.
            message (str, optional): The error message. Has default message.

        """
        self.key = key
        self.message = message
        super().__init__(f"{message}: {key!r}")


class SourceTeardownError(PosLiveException):
    """Exception raised when an external teardown call fails.

    Never propagated out of the registry; it is built so the failure can be
    logged and counted with the key attached.
    """

    def __init__(self, key: Hashable, message: Optional[str] = "Teardown failed"):
        """Create a new SourceTeardownError instance.

        Args:
        ----
            key (Hashable): The subscription key whose teardown failed.
            message (str, optional): The error message. Has default message.

        """
        self.key = key
        self.message = message
        super().__init__(f"{message}: {key!r}")


class KeyCollisionError(PosLiveException):
    """Raised when a second scope claims a key and collisions are rejected."""

    def __init__(self, key: Hashable, owner: Hashable, requested_by: Hashable):
        """Create a new KeyCollisionError instance.

        Args:
        ----
            key (Hashable): The contested subscription key.
            owner (Hashable): The scope currently owning the key.
            requested_by (Hashable): The scope that attempted to claim it.

        """
        self.key = key
        self.owner = owner
        self.requested_by = requested_by
        super().__init__(
            f"Key {key!r} is owned by scope {owner!r}; refusing transfer to {requested_by!r}"
        )


class NoActiveTenantError(PosLiveException):
    """Raised when a resource subscription is requested before a tenant is set."""

    def __init__(self, message: Optional[str] = "No active tenant"):
        """Create a new NoActiveTenantError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class PayloadValidationError(PosLiveException):
    """Raised when a raw payload does not match its resource type's schema."""

    def __init__(self, resource_type: str, errors: Optional[list[Any]] = None):
        """Create a new PayloadValidationError instance.

        Args:
        ----
            resource_type (str): The resource type the payload was validated against.
            errors (list, optional): Validation error details.

        """
        self.resource_type = resource_type
        self.errors = errors or []
        super().__init__(
            f"Invalid '{resource_type}' payload ({len(self.errors)} validation error(s))"
        )
