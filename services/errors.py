"""Local validation errors raised before any request reaches the provider."""

from __future__ import annotations


class RequestValidationError(ValueError):
    """Raised when the arguments of a call cannot form a valid request."""


class PlanUnavailableError(RequestValidationError):
    """Raised when a plan is not offered in the requested region."""

    def __init__(self, region_id: int, plan_id: int) -> None:
        super().__init__(f"Plan ID {plan_id} is not available in region {region_id}.")
        self.region_id = region_id
        self.plan_id = plan_id
