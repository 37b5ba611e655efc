"""Display mode automation for Sway.

Rearranges application windows across physical displays, updates Slack
status, and performs housekeeping (disk ejection, screen lock, sleep
prevention) for a small set of named modes: work, home, meeting, eod,
walk and lunch. A daemon also reacts to monitor hotplug and wake events.

Modules:
    - models: Pydantic configuration and result models
    - displays: Left-to-right display ranking from Sway outputs
    - placer: Window placement from layout tables
    - slack: Slack status and presence updates
    - system: notify-send, volume ejection, screen lock, sleep inhibition
    - retry: Retry policy for network calls
    - scheduler: Delayed callbacks on the event loop
    - modes: The named mode procedures
    - watchers: Display-count, wake and startup reactions
    - login1: logind resume and unlock signals over D-Bus
    - daemon: Main daemon wiring everything together
    - ipc_server, client: JSON-RPC over a unix socket
    - launcher: Desktop entries for application launchers
    - cli: Click command line
"""

import logging

__version__ = "1.0.0"
__author__ = "vpittamp"

__all__ = [
    "__version__",
    "configure_logging",
]


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
) -> logging.Logger:
    """Configure package-level logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string. Defaults to standard format
            with timestamp, level, module, and message.

    Returns:
        Configured logger instance for the display_modes package.
    """
    if format_string is None:
        format_string = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

    logger = logging.getLogger("display_modes")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)

    return logger

