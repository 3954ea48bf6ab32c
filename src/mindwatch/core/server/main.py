"""MindWatch server entry point — ``python -m mindwatch.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from mindwatch.core.config.settings import get_settings
from mindwatch.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the MindWatch MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.mindwatch_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger = logging.getLogger(__name__)
    if not settings.mindwatch_allow_insecure_bind and not _is_loopback_host(settings.mindwatch_host):
        raise RuntimeError(
            "Refusing to bind MindWatch to a non-loopback host without an auth layer. "
            "Set MINDWATCH_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info(
        "Starting MindWatch server on %s:%d",
        settings.mindwatch_host,
        settings.mindwatch_port,
    )

    mcp = create_app(settings_override=settings)
    mcp.run(
        transport="streamable-http",
        host=settings.mindwatch_host,
        port=settings.mindwatch_port,
    )


if __name__ == "__main__":
    run()
