"""
Form data validation rules
Checks submitted field values before they are relayed to the CEAC window
"""
import re
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Pattern

from .models import ValidationResult


class FieldRule(ABC):
    """Abstract base class for per-field validation rules"""

    def __init__(self, field_name: str):
        self.field_name = field_name

    def check(self, fields: Mapping[str, Any]) -> List[str]:
        """
        Validate this rule's field if it is present.

        Empty values are treated as absent.

        Returns:
            List of error messages, empty when the value is acceptable
        """
        value = fields.get(self.field_name)
        if value is None or value == "":
            return []
        return self.check_value(value)

    @abstractmethod
    def check_value(self, value: Any) -> List[str]:
        """Validate a present value"""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field_name='{self.field_name}')"


class CountryRule(FieldRule):
    """Embassy location must be a string of at most 100 characters"""

    MAX_LENGTH = 100

    def __init__(self):
        super().__init__("country")

    def check_value(self, value: Any) -> List[str]:
        if not isinstance(value, str):
            return ["Country must be a string"]
        if len(value) > self.MAX_LENGTH:
            return ["Country value exceeds maximum length"]
        return []


class CaptchaRule(FieldRule):
    """CAPTCHA code must be short and alphanumeric"""

    MAX_LENGTH = 10
    ALLOWED: Pattern[str] = re.compile(r'[a-zA-Z0-9]+')

    def __init__(self):
        super().__init__("captcha")

    def check_value(self, value: Any) -> List[str]:
        if not isinstance(value, str):
            return ["CAPTCHA must be a string"]
        if len(value) > self.MAX_LENGTH:
            return ["CAPTCHA value exceeds maximum length"]
        if not self.ALLOWED.fullmatch(value):
            return ["CAPTCHA contains invalid characters"]
        return []


DEFAULT_RULES: List[FieldRule] = [CountryRule(), CaptchaRule()]


def validate_form_data(
    fields: Mapping[str, Any],
    rules: Optional[List[FieldRule]] = None
) -> ValidationResult:
    """
    Validate form data before submission.

    Every rule runs independently; unknown fields are ignored.
    Never raises for bad values, violations are reported in the result.
    """
    errors: List[str] = []
    for rule in rules if rules is not None else DEFAULT_RULES:
        errors.extend(rule.check(fields))

    return ValidationResult(valid=not errors, errors=errors)
