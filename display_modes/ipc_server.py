"""
IPC Server for display-modes

JSON-RPC server invoking modes and reporting display/daemon state.
One request per line, one response per line.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ErrorCode, ModeError, error_response, validate_params
from .models import Mode

logger = logging.getLogger(__name__)

MODE_METHODS = [mode.value for mode in Mode]
AVAILABLE_METHODS = MODE_METHODS + ["ping", "displays", "state"]


def default_socket_path() -> Path:
    """$XDG_RUNTIME_DIR/display-modes/ipc.sock, or ~/.cache when unset."""
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    base = Path(runtime_dir) if runtime_dir else Path.home() / ".cache"
    return base / "display-modes" / "ipc.sock"


class IPCServer:
    """JSON-RPC IPC server for mode invocation."""

    def __init__(self, daemon, socket_path: Optional[Path] = None):
        """
        Initialize IPC server.

        Args:
            daemon: DisplayModesDaemon instance
            socket_path: Unix socket path (defaults to the runtime dir)
        """
        self.daemon = daemon
        self.socket_path = socket_path or default_socket_path()
        self.server: Optional[asyncio.AbstractServer] = None
        self.clients = set()

    async def start(self):
        """Start IPC server."""
        self.socket_path.parent.mkdir(parents=True, exist_ok=True)

        # Remove stale socket
        if self.socket_path.exists():
            self.socket_path.unlink()

        self.server = await asyncio.start_unix_server(
            self._handle_client,
            path=str(self.socket_path)
        )

        logger.info(f"IPC server listening on {self.socket_path}")

    async def stop(self):
        """Stop IPC server."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()

        if self.socket_path.exists():
            self.socket_path.unlink()

        logger.info("IPC server stopped")

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """
        Handle client connection.

        Args:
            reader: Stream reader
            writer: Stream writer
        """
        self.clients.add(writer)
        logger.debug("Client connected")

        try:
            while True:
                data = await reader.readline()
                if not data:
                    break

                try:
                    request = json.loads(data.decode())
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    response = error_response(
                        ModeError(ErrorCode.PARSE_ERROR, f"Invalid JSON: {e}"), None
                    )
                else:
                    response = await self._handle_request(request)

                writer.write((json.dumps(response) + "\n").encode())
                await writer.drain()

        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug(f"Client went away: {e}")
        finally:
            self.clients.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionResetError, BrokenPipeError):
                pass
            logger.debug("Client disconnected")

    async def _handle_request(self, request: Any) -> Dict[str, Any]:
        """
        Handle a JSON-RPC request.

        Args:
            request: Decoded JSON-RPC request

        Returns:
            JSON-RPC response dict
        """
        if not isinstance(request, dict):
            return error_response(
                ModeError(ErrorCode.INVALID_REQUEST, "Request must be a JSON object"), None
            )

        method = request.get("method")
        params = request.get("params") or {}
        request_id = request.get("id")

        logger.debug(f"Received request: {method}")

        try:
            if not method:
                raise ModeError(
                    code=ErrorCode.INVALID_REQUEST,
                    message="Missing 'method' field in request",
                    suggestion="Provide 'method' field in JSON-RPC request"
                )

            if method in MODE_METHODS:
                result = await self._handle_mode(Mode(method), params)
            elif method == "displays":
                result = await self._handle_displays(params)
            elif method == "state":
                validate_params(params, required=[], optional=[])
                result = await self.daemon.get_state()
            elif method == "ping":
                result = {"status": "ok", "daemon": "display-modes"}
            else:
                raise ModeError(
                    code=ErrorCode.METHOD_NOT_FOUND,
                    message=f"Method not found: {method}",
                    suggestion="Check API documentation for available methods",
                    context={"available_methods": AVAILABLE_METHODS}
                )

            return {
                "jsonrpc": "2.0",
                "result": result,
                "id": request_id
            }

        except ModeError as e:
            logger.error(f"Error in {method}: {e.message}")
            return error_response(e, request_id)

        except Exception as e:
            logger.error(f"Unexpected error handling {method}: {e}", exc_info=True)
            return error_response(e, request_id)

    def _require_controller(self):
        if self.daemon.controller is None:
            raise ModeError(
                code=ErrorCode.DAEMON_NOT_INITIALIZED,
                message="Mode controller not initialized",
                suggestion="Wait for daemon to finish connecting to Sway"
            )
        return self.daemon.controller

    async def _handle_mode(self, mode: Mode, params: Dict[str, Any]) -> Dict[str, Any]:
        validate_params(params, required=[], optional=[])
        controller = self._require_controller()
        result = await controller.run(mode)
        return result.to_dict()

    async def _handle_displays(self, params: Dict[str, Any]) -> Dict[str, Any]:
        validate_params(params, required=[], optional=[])
        if self.daemon.displays is None:
            raise ModeError(
                code=ErrorCode.DAEMON_NOT_INITIALIZED,
                message="Display query not initialized",
                suggestion="Wait for daemon to finish connecting to Sway"
            )
        displays = await self.daemon.displays.all()
        return {
            "count": len(displays),
            "displays": [d.model_dump() for d in displays],
        }
