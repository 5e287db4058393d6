"""Typed failures raised by the dispatch write path.

Malformed input uses Protean's ``ValidationError`` (field -> messages) and
missing records use ``ObjectNotFoundError``. The classes below cover the
business outcomes a caller has to tell apart: a configuration gap, a route
no courier serves, a failing external dependency (the only retryable one),
a duplicate shipment, and a caller who is not allowed to act.
"""


class DispatchError(Exception):
    """Base class for dispatch business failures."""

    status_code = 400
    retryable = False

    def __init__(self, message: str, **details) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "retryable": self.retryable,
            **self.details,
        }


class ConfigurationError(DispatchError):
    """A precondition for automatic shipping is not configured."""

    status_code = 422


class UnserviceableRouteError(DispatchError):
    """No configured courier serves the route; the shipment must be entered manually."""

    status_code = 422

    def __init__(self, message: str, couriers_checked: list[str] | None = None) -> None:
        super().__init__(
            message,
            couriers_checked=list(couriers_checked or []),
            fallback_mode="MANUAL",
        )
        self.couriers_checked = list(couriers_checked or [])


class DependencyError(DispatchError):
    """The carrier aggregator failed, timed out, or returned an unusable answer."""

    status_code = 502
    retryable = True


class ConflictError(DispatchError):
    """An open shipment already exists for the requisition."""

    status_code = 409


class AccessDeniedError(DispatchError):
    """The caller is not allowed to perform the operation."""

    status_code = 403
