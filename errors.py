# errors.py

from typing import Optional

from fastapi import status


class HookerError(Exception):
    """Base class for every failure that ends a webhook request."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    @property
    def response_body(self) -> str:
        # Existing webhook senders only ever see the bare status number.
        return str(self.status_code)


class MalformedPayload(HookerError):
    def __init__(self, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(f"invalid payload: {cause}")


class IgnoredNotMaster(HookerError):
    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"ignoring changeset on '{ref}', not a change on master")


class NotFound(HookerError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"invalid repository '{path}': {reason}")


class Forbidden(HookerError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"not a git repository '{path}': {reason}")


class SyncFailed(HookerError):
    def __init__(self, step: str, cause: Exception, path: str = ""):
        self.step = step
        self.cause = cause
        self.path = path
        super().__init__(f"sync step '{step}' failed for '{path}': {cause}")
