"""
Security module for ceac-filler
Validation, rate limiting, sessions, audit logging and encryption helpers
"""
from .models import AccessEntry, Session, RateWindow, ValidationResult
from .validation import FieldRule, CountryRule, CaptchaRule, validate_form_data
from .session_manager import SessionManager
from .rate_limiter import RateLimiter
from .audit_logger import AuditLogger
from .encryption import DataEncryptor, EncryptedPayload

__all__ = [
    'AccessEntry',
    'Session',
    'RateWindow',
    'ValidationResult',
    'FieldRule',
    'CountryRule',
    'CaptchaRule',
    'validate_form_data',
    'SessionManager',
    'RateLimiter',
    'AuditLogger',
    'DataEncryptor',
    'EncryptedPayload'
]
