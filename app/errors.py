"""
Service-level error taxonomy.

Services raise these; main registers one handler that renders them as
{"Message": ...} with the matching status code. "Not found" is not an
exception: services return None / False and routers answer 404.
"""


class ServiceError(Exception):
    """Base class; carries a client-safe message and an HTTP status."""

    status_code = 500

    def __init__(self, msg: str):
        self.msg = msg
        super().__init__(msg)


class ValidationError(ServiceError):
    """Malformed or missing input, rejected before storage is touched."""

    status_code = 400

    def __init__(self, msg: str, field: str | None = None):
        self.field = field
        super().__init__(msg)


class AuthenticationFailure(ServiceError):
    """Bad credentials. Same message for unknown email and wrong password."""

    status_code = 401


class UpstreamFailure(ServiceError):
    """The external book catalog errored or timed out."""

    status_code = 502


class StorageError(ServiceError):
    """Persistence failed; details are logged, never returned."""

    status_code = 500
