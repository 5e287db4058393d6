"""Request-scoped caller identity, read from the identity headers."""

from fastapi import Header
from protean.exceptions import ValidationError

from dispatch.errors import AccessDeniedError
from dispatch.utils.logging import bind_request_context, clear_request_context
from dispatch.workflow.context import CallerRole, RequestContext


def request_context(
    x_company_id: str = Header(),
    x_caller_role: str = Header(),
    x_vendor_id: str | None = Header(default=None),
) -> RequestContext:
    try:
        role = CallerRole(x_caller_role)
    except ValueError:
        raise ValidationError({"x-caller-role": [f"Unknown caller role: {x_caller_role}"]}) from None

    clear_request_context()
    bind_request_context(company_id=x_company_id, role=role.value, vendor_id=x_vendor_id)
    return RequestContext(company_id=x_company_id, role=role, vendor_id=x_vendor_id)


def require_role(context: RequestContext, *roles: CallerRole) -> None:
    if context.role not in roles:
        allowed = ", ".join(role.value for role in roles)
        raise AccessDeniedError(f"This action requires one of: {allowed}")


def require_vendor(context: RequestContext) -> str:
    """The calling vendor's id; fails closed when the caller is not a vendor."""
    require_role(context, CallerRole.VENDOR)
    if not context.vendor_id:
        raise AccessDeniedError("Vendor callers must send X-Vendor-Id")
    return context.vendor_id
