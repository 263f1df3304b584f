"""Domain-specific exceptions for bridge operations.

These exceptions are safe to import from API and config layers without pulling in HTTP clients.
"""

from __future__ import annotations


class BridgeError(Exception):
    status_code: int = 500
    default_detail: str = "Bridge error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class ConfigurationError(BridgeError):
    default_detail = "Service is not configured."


class VendorApiError(BridgeError):
    """A Bandwidth API request failed or returned an unusable body."""

    default_detail = "Vendor API request failed."

    def __init__(
        self,
        detail: str | None = None,
        *,
        vendor_status: int | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(detail)
        self.vendor_status = vendor_status
        self.transient = transient

    @property
    def not_found(self) -> bool:
        return self.vendor_status == 404


class UnknownCallError(BridgeError):
    status_code = 400
    default_detail = "No participant is registered for this call."


class OutboundNumberNotConfiguredError(BridgeError):
    status_code = 400
    default_detail = "No outbound phone number has been set."


class MissingCallIdError(BridgeError):
    status_code = 400
    default_detail = "Callback has no callId."
