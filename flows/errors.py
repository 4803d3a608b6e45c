class FlowError(Exception):
    pass


class ValidationError(FlowError):
    """User input that is malformed or outside policy. Shown inline."""

    def __init__(self, message: str, code: str = "invalid_input"):
        super().__init__(message)
        self.message = message
        self.code = code


class InvalidStateTransitionError(FlowError):
    pass
