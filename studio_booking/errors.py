"""Domain errors. Each maps to an HTTP status and renders as {"error": message}."""


class StudioError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StudioError):
    status_code = 400


class InvalidSessionType(ValidationError):
    def __init__(self, message: str = "Invalid session type"):
        super().__init__(message)


class NotFound(StudioError):
    status_code = 404


class SlotUnavailable(StudioError):
    status_code = 409

    def __init__(self, message: str = "Time slot not available"):
        super().__init__(message)


class InternalError(StudioError):
    status_code = 500
