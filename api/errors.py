from typing import Optional


class ApiError(Exception):
    """Error that is safe to show to the API caller.

    Route handlers let it propagate; the exception handler registered in
    `api.responses` turns it into `{"success": false, "error": ..., "help": ...}`
    with `status_code` as the HTTP status.
    """

    def __init__(self, message: str, status_code: int = 500, help: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.help = help

    def __repr__(self):
        return f"ApiError({self.message!r}, status_code={self.status_code})"
