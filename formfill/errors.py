"""
Exception types raised inside ceac-filler

Request-level errors are caught by the coordinator and converted into
{"success": False, "message": ...} results.
"""


class FormFillError(Exception):
    """Base exception for ceac-filler errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSession(FormFillError):
    """No live session is bound to the requesting window"""

    def __init__(self, message: str = "Invalid session"):
        super().__init__(message)


class RateLimitExceeded(FormFillError):
    """Too many attempts inside the current rate window"""

    def __init__(self, message: str = "Rate limit exceeded. Please wait before trying again."):
        super().__init__(message)


class ValidationFailed(FormFillError):
    """Submitted field values violate the validation rules"""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__(self.errors[0] if self.errors else "Invalid form data")


class TargetWindowNotOpen(FormFillError):
    """The CEAC window has not been opened yet"""

    def __init__(self, message: str = "CEAC website window is not open"):
        super().__init__(message)


class ElementNotFound(FormFillError):
    """No location strategy matched an element for a field"""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name} element not found")


class CryptoOperationFailed(FormFillError):
    """Encryption or decryption failed"""
    pass


class KeyProvisioningError(CryptoOperationFailed):
    """No usable encryption key was provided"""
    pass
