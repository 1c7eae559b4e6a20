"""Errors raised by the intelligence pipeline."""


class PipelineInputError(ValueError):
    """Raised when an explicit argument to a pipeline entry point is malformed.

    Business conditions (no champion, no competitors, empty sources) never
    raise; only the shape of required input does.
    """

    def __init__(self, stage: str, field: str, message: str):
        self.stage = stage
        self.field = field
        self.message = message
        super().__init__(f"{stage}: invalid {field}: {message}")
