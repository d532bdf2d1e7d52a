"""Exceptions raised by the Swish client."""

from typing import Optional

from swish_client.shared.models import ApiError, PAYEE_ALIAS_MISMATCH, format_api_errors


class SwishError(Exception):
    pass


class ConfigurationError(SwishError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid client configuration: {detail}")


class RemoteError(SwishError):
    """Error entries reported by the gateway, surfaced verbatim."""

    def __init__(self, errors: list[ApiError]):
        self.errors = list(errors)
        super().__init__(format_api_errors(self.errors))

    @property
    def error_code(self) -> Optional[str]:
        return self.errors[0].error_code if self.errors else None

    @property
    def error_message(self) -> Optional[str]:
        return self.errors[0].error_message if self.errors else None


class ValidationError(RemoteError):
    pass


class AliasMismatchError(RemoteError):
    def __init__(self):
        super().__init__([PAYEE_ALIAS_MISMATCH])


class NotFoundError(RemoteError):
    pass


class TransportError(SwishError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class UnexpectedStatusError(TransportError):
    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Unexpected HTTP status {status_code}: {body[:200]}")


class DecodeError(SwishError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Could not decode gateway response: {detail}")
