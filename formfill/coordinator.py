"""
Coordinator module for ceac-filler
Handles control-panel requests and relays form data to the CEAC window
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .browser import BrowserWindow, WindowHost
from .config import ConfigurationManager, FillConfig
from .errors import (
    FormFillError,
    InvalidSession,
    RateLimitExceeded,
    TargetWindowNotOpen,
    ValidationFailed
)
from .security import AuditLogger, RateLimiter, SessionManager, validate_form_data
from .security.session_manager import DATA_ACCESS_ACTION
from .utils import epoch_millis

logger = logging.getLogger(__name__)


def _result(success: bool, message: str) -> Dict[str, Any]:
    return {"success": success, "message": message}


class Coordinator:
    """Privileged side of the control panel / CEAC window boundary"""

    def __init__(
        self,
        session_manager: SessionManager,
        rate_limiter: RateLimiter,
        audit_logger: AuditLogger,
        window: WindowHost,
        fill_config: FillConfig
    ):
        self.session_manager = session_manager
        self.rate_limiter = rate_limiter
        self.audit_logger = audit_logger
        self.window = window
        self.fill_config = fill_config

        self.control_panel_session: Optional[str] = None
        self.target_session: Optional[str] = None

        self.window.set_close_handler(self._on_target_closed)

    @classmethod
    def from_config(
        cls,
        config_manager: ConfigurationManager,
        window: Optional[WindowHost] = None
    ) -> "Coordinator":
        """Build a coordinator with freshly constructed security components"""
        security = config_manager.security
        return cls(
            session_manager=SessionManager(max_age_seconds=security.session_max_age),
            rate_limiter=RateLimiter(
                max_attempts=security.rate_limit_max_attempts,
                time_window_seconds=security.rate_limit_window
            ),
            audit_logger=AuditLogger(max_entries=security.audit_max_entries),
            window=window or BrowserWindow(config_manager.fill),
            fill_config=config_manager.fill
        )

    def attach_control_panel(self) -> str:
        """Create the session for the control panel connection"""
        session_id = f"main-{epoch_millis(datetime.now())}"
        self.session_manager.create_session(session_id)
        self.control_panel_session = session_id

        self.audit_logger.log({
            "eventType": "WINDOW_CREATED",
            "message": "Main control panel window created",
            "sessionId": session_id
        })
        return session_id

    def detach_control_panel(self) -> None:
        """Destroy the control panel session"""
        if self.control_panel_session:
            self.session_manager.destroy_session(self.control_panel_session)
            self.control_panel_session = None

    def _require_session(self) -> str:
        if not self.control_panel_session:
            logger.error("Invalid session")
            raise InvalidSession()
        return self.control_panel_session

    def _on_target_closed(self) -> None:
        if self.target_session:
            self.session_manager.destroy_session(self.target_session)
            self.target_session = None

        self.audit_logger.log({
            "eventType": "CEAC_WINDOW_CLOSED",
            "message": "CEAC website window closed",
            "sessionId": self.control_panel_session
        })

    async def open_site(self) -> Dict[str, Any]:
        """Open the CEAC window, or focus it if it is already open"""
        try:
            session_id = self._require_session()

            if self.window.is_open:
                await self.window.focus()
                self.audit_logger.log({
                    "eventType": "CEAC_WINDOW_FOCUSED",
                    "message": "CEAC window already open, focused",
                    "sessionId": session_id
                })
                return _result(True, "CEAC website window already open")

            await self.window.open(self.fill_config.target_url)

            target_session = f"ceac-{epoch_millis(datetime.now())}"
            self.session_manager.create_session(target_session)
            self.target_session = target_session

            self.audit_logger.log({
                "eventType": "CEAC_WINDOW_OPENED",
                "message": "CEAC website window opened",
                "sessionId": session_id,
                "ceacSessionId": target_session
            })
            return _result(True, "CEAC website opened")

        except InvalidSession as e:
            return _result(False, e.message)
        except Exception as e:
            logger.error(f"Error opening CEAC website: {e}", exc_info=True)
            self.audit_logger.log({
                "eventType": "ERROR",
                "message": f"Error opening CEAC website: {e}",
                "severity": "high"
            })
            return _result(False, "Failed to open CEAC website")

    async def submit_form_data(self, fields: Any) -> Dict[str, Any]:
        """Validate, rate-limit and relay form data to the CEAC window"""
        if not isinstance(fields, Mapping):
            return _result(False, "Invalid data format")

        try:
            session_id = self._require_session()

            # Validation runs first so rejected data does not use up an attempt
            validation = validate_form_data(fields)
            if not validation.valid:
                self.audit_logger.log({
                    "eventType": "VALIDATION_FAILED",
                    "message": f"Invalid form data: {', '.join(validation.errors)}",
                    "sessionId": session_id,
                    "errors": validation.errors
                })
                raise ValidationFailed(validation.errors)

            if not self.rate_limiter.check_limit(session_id):
                self.audit_logger.log({
                    "eventType": "RATE_LIMIT_EXCEEDED",
                    "message": "Too many form submission attempts",
                    "sessionId": session_id
                })
                raise RateLimitExceeded()

            if not self.window.is_open:
                logger.error("CEAC window not open")
                raise TargetWindowNotOpen()

            self.session_manager.log_access(session_id, DATA_ACCESS_ACTION, "Form data submission")
            self.audit_logger.log({
                "eventType": "FORM_DATA_RECEIVED",
                "message": "Form data received and validated",
                "sessionId": session_id
            })

            # Let the page settle before pushing values
            await asyncio.sleep(self.fill_config.settle_delay)

            self.window.send_fill(dict(fields))
            await self.window.focus()

            self.audit_logger.log({
                "eventType": "FORM_FILL_INITIATED",
                "message": "Form fill initiated on CEAC website",
                "sessionId": session_id
            })
            return _result(True, "Form data sent to CEAC website")

        except FormFillError as e:
            return _result(False, e.message)
        except Exception as e:
            logger.error(f"Error injecting form data: {e}", exc_info=True)
            self.audit_logger.log({
                "eventType": "ERROR",
                "message": f"Form injection error: {e}",
                "severity": "high"
            })
            return _result(False, "An error occurred while processing your request")

    async def get_security_status(self) -> Dict[str, Any]:
        """Summarise the control panel session"""
        if not self.control_panel_session or not (
            session := self.session_manager.get_session(self.control_panel_session)
        ):
            return {"secure": False, "message": "Invalid session"}

        age = datetime.now() - session.created_at
        return {
            "secure": True,
            "message": "Application is secure",
            "sessionId": session.session_id,
            "sessionAge": int(age.total_seconds() * 1000),
            "dataAccessCount": session.data_access_count,
            "accessLogEntries": len(session.access_log)
        }

    async def clear_sensitive_data(self) -> Dict[str, Any]:
        """Drop the in-memory audit trail"""
        self.audit_logger.clear_logs()
        self.audit_logger.log({
            "eventType": "SENSITIVE_DATA_CLEARED",
            "message": "Sensitive data cleared from memory"
        })
        return _result(True, "Sensitive data cleared")

    def cleanup(self) -> None:
        """Sweep expired sessions and stale rate windows"""
        removed = self.session_manager.cleanup_expired_sessions()
        pruned = self.rate_limiter.prune_expired()
        if removed or pruned:
            logger.info(f"Cleanup removed {removed} sessions and {pruned} rate windows")

    async def shutdown(self) -> None:
        """Log the recent audit trail and close the CEAC window"""
        for entry in self.audit_logger.recent(10):
            logger.info(f"[{entry['timestamp']}] {entry.get('eventType')}: {entry.get('message')}")

        self.detach_control_panel()
        await self.window.close()
