"""
Data models for the security bundle
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List


@dataclass(frozen=True)
class AccessEntry:
    """Record of one access made through a session"""
    timestamp: datetime
    action: str
    details: str


@dataclass
class Session:
    """Bounded-lifetime record of one window's activity"""
    session_id: str
    created_at: datetime
    last_activity: datetime
    access_log: List[AccessEntry] = field(default_factory=list)
    data_access_count: int = 0


@dataclass
class RateWindow:
    """Attempt counter for one fixed rate window"""
    count: int
    window_start: datetime


@dataclass
class ValidationResult:
    """Result of validating submitted form fields"""
    valid: bool
    errors: List[str] = field(default_factory=list)
