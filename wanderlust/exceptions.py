DEFAULT_ERROR_MESSAGE = "Something went wrong!"


class AppError(Exception):
    """An error that carries the HTTP status and message to show the user."""

    def __init__(self, status_code=500, message=DEFAULT_ERROR_MESSAGE):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def to_dict(self):
        return {"status_code": self.status_code, "message": self.message}

    def __repr__(self):
        return f"AppError({self.status_code!r}, {self.message!r})"
