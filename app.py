import logging
import os
import socket

from yushan_admin.logging_config import configure_logging
from yushan_admin.ui.dash_app import create_dash_app

DEBUG = os.getenv("DEBUG", "0") == "1"

configure_logging(level="DEBUG" if DEBUG else None)
logger = logging.getLogger("yushan_admin")

app = create_dash_app()
server = app.server


def port_is_free(port: int, host: str = "localhost") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex((host, port)) != 0


def pick_port(preferred: int, attempts: int = 100) -> int:
    """First free port at or above ``preferred``; ``preferred`` if none is."""
    return next(
        (p for p in range(preferred, preferred + attempts) if port_is_free(p)),
        preferred,
    )


if __name__ == "__main__":
    preferred = int(os.getenv("PORT", "8050"))
    port = pick_port(preferred)
    if port != preferred:
        logger.warning("Port taken, using another", extra={"requested": preferred, "port": port})

    logger.info("Serving admin console", extra={"port": port, "debug": DEBUG})
    app.run(host=os.getenv("HOST", "0.0.0.0"), port=port, debug=DEBUG)
