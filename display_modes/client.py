"""JSON-RPC client for the display-modes daemon socket."""

import json
import socket
from pathlib import Path
from typing import Any, Dict, Optional

from .ipc_server import default_socket_path

DAEMON_HINT = "Start it with: display-modes daemon (or systemctl --user start display-modes)"


class DaemonClient:
    """Blocking JSON-RPC client, one connection per call."""

    def __init__(self, socket_path: Optional[Path] = None, timeout: float = 60.0):
        """
        Args:
            socket_path: Daemon socket (defaults to the runtime dir socket)
            timeout: Seconds to wait; modes that eject volumes can be slow
        """
        self.socket_path = socket_path or default_socket_path()
        self.timeout = timeout
        self.request_id = 0

    def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call a JSON-RPC method.

        Returns:
            Method result

        Raises:
            RuntimeError: If the daemon is unreachable or returns an error
        """
        self.request_id += 1
        request = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or {},
            "id": self.request_id
        }

        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.settimeout(self.timeout)
                sock.connect(str(self.socket_path))
                sock.sendall(json.dumps(request).encode() + b"\n")

                response_data = b""
                while b"\n" not in response_data:
                    chunk = sock.recv(4096)
                    if not chunk:
                        break
                    response_data += chunk

        except socket.timeout:
            raise RuntimeError(f"Timeout waiting for daemon ({self.timeout:.0f}s)")
        except FileNotFoundError:
            raise RuntimeError(f"Daemon socket not found: {self.socket_path}\n{DAEMON_HINT}")
        except ConnectionRefusedError:
            raise RuntimeError(f"Daemon not running.\n{DAEMON_HINT}")

        if not response_data:
            raise RuntimeError("Daemon closed the connection without a response")

        response = json.loads(response_data.decode())
        if "error" in response:
            error = response["error"]
            message = error.get("message", "Unknown error")
            if error.get("suggestion"):
                message += f" ({error['suggestion']})"
            raise RuntimeError(f"Daemon error: {message}")

        return response.get("result")
