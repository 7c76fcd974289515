from typing import Optional


class VikunjaError(Exception):
    """Any failed call against the Vikunja API (transport or non-2xx status)."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
