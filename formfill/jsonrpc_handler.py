"""
JSONRPCHandler module for ceac-filler
Exposes the coordinator operations to the control panel over JSON-RPC
"""
import logging
from typing import Any, Callable, Dict, Optional

from .coordinator import Coordinator

logger = logging.getLogger(__name__)


class JSONRPCHandler:
    """Handles JSON-RPC protocol wrapping"""

    def __init__(self, coordinator: Coordinator):
        self.coordinator = coordinator
        self._method_handlers = self._setup_method_handlers()

    def _setup_method_handlers(self) -> Dict[str, Callable]:
        """Setup mapping of methods to handlers"""
        return {
            "openSite": lambda _: self.coordinator.open_site(),
            "submitFormData": self._submit_form_data,
            "getSecurityStatus": lambda _: self.coordinator.get_security_status(),
            "clearSensitiveData": lambda _: self.coordinator.clear_sensitive_data(),
        }

    async def _submit_form_data(self, params: Any) -> Dict[str, Any]:
        # Accept {"fields": {...}} or the field mapping itself
        if isinstance(params, dict) and isinstance(params.get("fields"), dict):
            params = params["fields"]
        return await self.coordinator.submit_form_data(params)

    async def handle_request(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Handle incoming JSON-RPC request"""
        method = data.get("method", "")
        params = data.get("params", {})

        # Check if this is a notification (no id field)
        if "id" not in data:
            await self._handle_notification(method, params)
            return None

        request_id = data.get("id")

        try:
            if handler := self._method_handlers.get(method):
                response = await handler(params)
                return self._create_success_response(request_id, response)

            return self._create_error_response(
                request_id,
                -32601,
                f"Method not found: {method}"
            )

        except Exception as e:
            logger.error(f"Error handling request: {e}", exc_info=True)
            return self._create_error_response(
                request_id,
                -32603,
                "Internal error",
                str(e)
            )

    async def _handle_notification(self, method: str, params: Dict[str, Any]) -> None:
        """Handle notifications (requests without id); the control panel sends none"""
        logger.info(f"Unhandled notification: {method}")

    def _create_success_response(self, request_id: Any, result: Any) -> Dict[str, Any]:
        """Create a successful JSON-RPC response"""
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": result
        }

    def _create_error_response(
        self,
        request_id: Any,
        code: int,
        message: str,
        data: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create an error JSON-RPC response"""
        error: Dict[str, Any] = {
            "code": code,
            "message": message
        }

        if data:
            error["data"] = data

        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": error
        }
