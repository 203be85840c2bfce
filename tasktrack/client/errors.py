from typing import List, Optional


class ApiError(Exception):
    """A non-2xx response from the TaskTrack API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class BatchWriteError(Exception):
    """One or more writes of a concurrent batch failed.

    Writes that succeeded are not rolled back.
    """

    def __init__(self, failures: List[BaseException], total: Optional[int] = None):
        self.failures = failures
        self.total = total
        count = f"{len(failures)}/{total}" if total is not None else str(len(failures))
        super().__init__(f"{count} writes failed: {failures[0] if failures else ''}")
