"""
Logging Infrastructure
======================

Structured logging with support for:
- JSON formatted logs for production
- Text formatted logs for development
- Context binding for request tracing
- Dedicated security and audit event loggers
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

import structlog
from structlog.types import Processor

from app.core.config import get_settings

# Context variables for request tracing
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_context: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


def add_context_variables(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Add context variables to log entries.

    This processor adds request_id and user_id from context
    variables to every log entry.
    """
    request_id = request_id_context.get()
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_context.get()
    if user_id:
        event_dict["user_id"] = user_id

    return event_dict


def get_log_level(settings: Any) -> int:
    """Convert string log level to logging constant."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(settings.LOG_LEVEL.upper(), logging.INFO)


def get_processors(settings: Any) -> list[Processor]:
    """Get structlog processors based on settings."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_variables,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return processors


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    This should be called once at application startup.
    """
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=get_log_level(settings),
    )

    structlog.configure(
        processors=get_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A structlog BoundLogger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("member_created", member_id="123", leader_id="456")
    """
    return structlog.get_logger(name)


# =====================================
# Security Event Logger
# =====================================

class SecurityLogger:
    """
    Logger for authentication and authorization events.

    Every event is emitted with `category="security"` so it can be
    filtered out of the regular application stream.
    """

    def __init__(self) -> None:
        self.log = get_logger("security")

    def log_login_success(self, user_id: str, ip_address: str) -> None:
        self.log.info(
            "login_success",
            category="security",
            user_id=user_id,
            ip_address=ip_address,
        )

    def log_login_failure(self, email: str, ip_address: str, reason: str) -> None:
        self.log.warning(
            "login_failure",
            category="security",
            email=email,
            ip_address=ip_address,
            reason=reason,
        )

    def log_logout(self, user_id: str) -> None:
        self.log.info("logout", category="security", user_id=user_id)

    def log_password_changed(self, user_id: str) -> None:
        self.log.info("password_changed", category="security", user_id=user_id)

    def log_token_invalid(self, reason: str, ip_address: str) -> None:
        self.log.warning(
            "token_invalid",
            category="security",
            reason=reason,
            ip_address=ip_address,
        )

    def log_unauthorized_access(self, user_id: str, resource: str, action: str) -> None:
        self.log.warning(
            "unauthorized_access",
            category="security",
            user_id=user_id,
            resource=resource,
            action=action,
        )

    def log_scope_violation(self, user_id: str, role: str, resource: str, resource_id: str) -> None:
        self.log.warning(
            "scope_violation",
            category="security",
            user_id=user_id,
            role=role,
            resource=resource,
            resource_id=resource_id,
        )

    def log_rate_limit_exceeded(self, ip_address: str, endpoint: str) -> None:
        self.log.warning(
            "rate_limit_exceeded",
            category="security",
            ip_address=ip_address,
            endpoint=endpoint,
        )


# =====================================
# Audit Logger
# =====================================

class AuditLogger:
    """Logger for data-changing actions performed through the API."""

    def __init__(self) -> None:
        self.log = get_logger("audit")

    def log_action(
        self,
        user_id: str,
        action: str,
        resource: str,
        resource_id: Optional[str] = None,
        **details: Any,
    ) -> None:
        """
        Record a create/update/delete action.

        Args:
            user_id: ID of the acting user
            action: Verb such as "create", "update", "delete"
            resource: Resource type, e.g. "member"
            resource_id: ID of the affected record
            **details: Extra fields to include in the event
        """
        self.log.info(
            f"{resource}_{action}",
            category="audit",
            actor_id=user_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            **details,
        )


security_logger = SecurityLogger()
audit_logger = AuditLogger()
