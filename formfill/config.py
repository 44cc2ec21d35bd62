"""
Configuration module for ceac-filler
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .utils import substitute_env_vars_deep

logger = logging.getLogger(__name__)

DEFAULT_TARGET_URL = "https://ceac.state.gov/genniv/"


class ConfigurationError(Exception):
    """Base exception for configuration errors"""
    pass


@dataclass
class FieldLocator:
    """Where to find one form field on the target page"""
    name: str
    xpath: Optional[str] = None
    selectors: List[str] = field(default_factory=list)


def default_field_locators() -> Dict[str, FieldLocator]:
    """Locators for the CEAC start page (embassy location and CAPTCHA)"""
    return {
        "country": FieldLocator(
            name="country",
            xpath='//*[@id="ctl00_SiteContentPlaceHolder_ucLocation_ddlLocation"]',
            selectors=[
                'select[name*="ctl00$SiteContentPlaceHolder$ucLocation$ddlLocation"]',
                'select[id*="ddlLocation"]',
                'select[name="Country"]',
                'select[id*="country"]',
            ],
        ),
        "captcha": FieldLocator(
            name="captcha",
            xpath='//*[@id="ctl00_SiteContentPlaceHolder_ucCaptcha_txtCaptchaCode"]',
            selectors=[
                'input[id*="captcha"]',
                'input[name*="captcha"]',
                'input[id*="code"]',
            ],
        ),
    }


@dataclass
class SecurityConfig:
    """Session, rate limit, audit and encryption settings"""
    session_max_age: float = 30 * 60
    cleanup_interval: float = 60
    rate_limit_max_attempts: int = 10
    rate_limit_window: float = 60
    audit_max_entries: Optional[int] = 10000
    encryption_key: Optional[str] = None


@dataclass
class FillConfig:
    """Target page and form-fill timing settings"""
    target_url: str = DEFAULT_TARGET_URL
    initial_delay: float = 0.5
    retry_attempts: int = 5
    retry_interval: float = 1.0
    settle_delay: float = 3.0
    headless: bool = False
    fields: Dict[str, FieldLocator] = field(default_factory=default_field_locators)


class ConfigurationManager:
    """Manages configuration for ceac-filler"""

    def __init__(self, config_file: Union[str, Path]):
        self.config_file = Path(config_file)
        self.security = SecurityConfig()
        self.fill = FillConfig()
        self.config: Dict = {}  # Store full configuration

    def load(self) -> "ConfigurationManager":
        """Load configuration from JSON file"""
        if not self.config_file.exists():
            error_msg = f"Configuration file not found: {self.config_file}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)

        try:
            with self.config_file.open('r') as f:
                config_data = json.load(f)

            if not isinstance(config_data, dict):
                raise ValueError("Configuration root must be a JSON object")

            config_data = substitute_env_vars_deep(config_data)
            self.config = config_data

            self.security = self._create_security(config_data.get('security', {}))
            self.fill = self._create_fill(config_data.get('fill', {}))
            logger.info(
                f"Loaded configuration with {len(self.fill.fields)} field locators "
                f"for {self.fill.target_url}"
            )

            return self

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in configuration file: {e}")
            raise ConfigurationError(f"Invalid JSON: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Configuration error: {e}")
            raise ConfigurationError(str(e)) from e

    def _create_security(self, data: Dict[str, Any]) -> SecurityConfig:
        """Create security settings, falling back to defaults"""
        defaults = SecurityConfig()
        security = SecurityConfig(
            session_max_age=float(data.get('session_max_age', defaults.session_max_age)),
            cleanup_interval=float(data.get('cleanup_interval', defaults.cleanup_interval)),
            rate_limit_max_attempts=int(data.get('rate_limit_max_attempts', defaults.rate_limit_max_attempts)),
            rate_limit_window=float(data.get('rate_limit_window', defaults.rate_limit_window)),
            audit_max_entries=(
                None if (max_entries := data.get('audit_max_entries', defaults.audit_max_entries)) is None
                else int(max_entries)
            ),
            encryption_key=data.get('encryption_key'),
        )

        if security.session_max_age <= 0 or security.rate_limit_window <= 0:
            raise ValueError("session_max_age and rate_limit_window must be positive")
        if security.cleanup_interval <= 0:
            raise ValueError("cleanup_interval must be positive")
        if security.rate_limit_max_attempts < 1:
            raise ValueError("rate_limit_max_attempts must be at least 1")
        if security.audit_max_entries is not None and security.audit_max_entries < 1:
            raise ValueError("audit_max_entries must be at least 1 or null")

        return security

    def _create_fill(self, data: Dict[str, Any]) -> FillConfig:
        """Create fill settings and field locators"""
        defaults = FillConfig()
        fields_data = data.get('fields')
        fields = self._create_locators(fields_data) if fields_data is not None else defaults.fields

        fill = FillConfig(
            target_url=data.get('target_url', defaults.target_url),
            initial_delay=float(data.get('initial_delay', defaults.initial_delay)),
            retry_attempts=int(data.get('retry_attempts', defaults.retry_attempts)),
            retry_interval=float(data.get('retry_interval', defaults.retry_interval)),
            settle_delay=float(data.get('settle_delay', defaults.settle_delay)),
            headless=bool(data.get('headless', defaults.headless)),
            fields=fields,
        )

        if fill.retry_attempts < 1:
            raise ValueError("retry_attempts must be at least 1")
        if min(fill.initial_delay, fill.retry_interval, fill.settle_delay) < 0:
            raise ValueError("Delays must not be negative")

        return fill

    def _create_locators(self, fields_data: Dict[str, Dict]) -> Dict[str, FieldLocator]:
        """Create field locators"""
        locators = {
            name: FieldLocator(
                name=name,
                xpath=locator_data.get('xpath'),
                selectors=list(locator_data.get('selectors', [])),
            )
            for name, locator_data in fields_data.items()
        }

        for locator in locators.values():
            if not locator.xpath and not locator.selectors:
                raise ValueError(f"Field '{locator.name}' needs an xpath or at least one selector")

        return locators
