"""
Errors raised by the display-modes daemon and its IPC surface.

Failures inside modes, placement, notifications and watchers are logged
where they happen and never raised this far. What remains here is fatal
startup trouble (config, Sway connection) and the JSON-RPC error replies.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """
    JSON-RPC error codes.

    The negative codes are the JSON-RPC 2.0 reserved range; the positive
    ones are daemon specific (11xx config, 14xx Sway, 15xx daemon state).
    """

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    CONFIG_LOAD_FAILED = 1100
    SWAY_IPC_FAILED = 1401
    DAEMON_NOT_INITIALIZED = 1500


class ModeError(Exception):
    """Base exception carrying an error code and an optional recovery hint."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-RPC error object; suggestion and context only when set."""
        error: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.suggestion:
            error["suggestion"] = self.suggestion
        if self.context:
            error["context"] = self.context
        return error


class ConfigLoadError(ModeError):
    """config.toml could not be read, decoded or validated."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            code=ErrorCode.CONFIG_LOAD_FAILED,
            message=f"Failed to load configuration from {file_path}: {reason}",
            suggestion="Fix the file or move it aside to start with defaults",
            context={"file_path": file_path},
        )


class SwayIPCError(ModeError):
    """The Sway IPC socket could not be used."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            code=ErrorCode.SWAY_IPC_FAILED,
            message=f"Sway IPC {operation} failed: {reason}",
            suggestion="Start the daemon from inside a Sway session (SWAYSOCK must be set)",
            context={"operation": operation},
        )


def error_response(error: Exception, request_id: Optional[Any] = None) -> Dict[str, Any]:
    """
    Wrap an exception in a JSON-RPC error response.

    ModeError keeps its own code; anything else becomes INTERNAL_ERROR.
    """
    if isinstance(error, ModeError):
        body = error.to_dict()
    else:
        body = {
            "code": ErrorCode.INTERNAL_ERROR.value,
            "message": str(error),
            "suggestion": "See the daemon journal (journalctl --user -u display-modes)",
        }
    return {"jsonrpc": "2.0", "error": body, "id": request_id}


def validate_params(params: Dict[str, Any], required: List[str], optional: Optional[List[str]] = None) -> None:
    """
    Check request params against the names a method accepts.

    Raises:
        ModeError: INVALID_PARAMS for missing required names, or for names
            outside required + optional when optional is given
    """
    missing = [key for key in required if key not in params]
    if missing:
        raise ModeError(
            code=ErrorCode.INVALID_PARAMS,
            message=f"Missing required parameters: {', '.join(missing)}",
            context={"missing": missing},
        )

    if optional is None:
        return

    allowed = set(required) | set(optional)
    unknown = sorted(key for key in params if key not in allowed)
    if unknown:
        raise ModeError(
            code=ErrorCode.INVALID_PARAMS,
            message=f"Unknown parameters: {', '.join(unknown)}",
            suggestion="Accepted: " + (", ".join(sorted(allowed)) or "no parameters"),
            context={"unknown": unknown},
        )
