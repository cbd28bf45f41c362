"""Floq server entry point (``python -m floq.core.server.main`` or ``floq-server``)."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from floq.core.config.settings import Settings, get_settings
from floq.core.server.app import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def _check_bind(settings: Settings) -> None:
    """Refuse public binds; the vibe and learning tools have no auth layer."""
    if settings.floq_allow_insecure_bind or _is_loopback_host(settings.floq_host):
        return
    raise RuntimeError(
        f"Refusing to expose the vibe engine on {settings.floq_host}: corrections and "
        "learning events are personal data and the MCP tools are unauthenticated. "
        "Set FLOQ_ALLOW_INSECURE_BIND=true to override (unsafe)."
    )


def run() -> None:
    """Start the Floq vibe MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.floq_log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    _check_bind(settings)

    logger.info(
        "Starting Floq vibe server on %s:%d (patterns=%s, tuning=%s, history=%d corrections)",
        settings.floq_host,
        settings.floq_port,
        "on" if settings.vibe_patterns else "off",
        settings.vibe_tuning_path or "default",
        settings.pattern_history_limit,
    )

    mcp = create_app(settings_override=settings)
    mcp.run(
        transport="streamable-http",
        host=settings.floq_host,
        port=settings.floq_port,
    )


if __name__ == "__main__":
    run()
