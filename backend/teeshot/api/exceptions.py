"""Custom exception classes for the API."""


class SessionNotFoundError(Exception):
    """Raised when a content session is unknown or has expired."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session with ID '{session_id}' not found")


class ImageNotFoundError(Exception):
    """Raised when a stored image asset does not exist."""

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"Image with ID '{file_id}' not found")


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
