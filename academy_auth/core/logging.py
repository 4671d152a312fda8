# academy_auth/core/logging.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import structlog

from academy_auth.core.config import Settings, settings as default_settings

_SENSITIVE_KEYS = ("password", "secret", "token", "authorization")


def _redact_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Never let credentials reach the log sink."""
    for key in list(event_dict.keys()):
        lower = key.lower()
        if any(s in lower for s in _SENSITIVE_KEYS) and isinstance(event_dict[key], str):
            event_dict[key] = "***"
    return event_dict


def setup_logging(config: Optional[Settings] = None) -> None:
    config = config or default_settings
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]
    if config.LOG_JSON:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
