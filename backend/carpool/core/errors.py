class RideError(Exception):
    kind = "server"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "kind": self.kind}


class ValidationError(RideError):
    """Client input failed a required-field or range check. Nothing was written."""

    kind = "validation"
    status_code = 400


class NotFoundError(RideError):
    kind = "not_found"
    status_code = 404


class ServerError(RideError):
    """Store or transport failure."""

    kind = "server"
    status_code = 500


def error_for_status(status_code: int, message: str) -> RideError:
    if status_code == 404:
        return NotFoundError(message)
    if 400 <= status_code < 500:
        return ValidationError(message)
    return ServerError(message)
