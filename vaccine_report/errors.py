from typing import Optional, Sequence


class PipelineError(Exception):
    """Base class for failures that abort a report run."""


class SourceUnavailable(PipelineError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read source '{path}': {reason}")


class MalformedRow(PipelineError):
    """A row that does not match the expected schema."""

    def __init__(self, row_index: int, raw: Sequence[str], reason: str):
        self.row_index = row_index
        self.raw = list(raw)
        self.reason = reason
        message = f"Malformed row {row_index}: {reason}"
        # row 0 is the header, which is kept out of messages
        if row_index:
            message += f" (raw={self.raw!r})"
        super().__init__(message)


class InvalidDate(PipelineError):
    def __init__(self, row_index: Optional[int], raw: str):
        self.row_index = row_index
        self.raw = raw
        super().__init__(f"Invalid date {raw!r} in row {row_index}, expected YYYY-MM-DD")
