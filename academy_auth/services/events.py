# academy_auth/services/events.py
"""User lifecycle events.

Publishing is fire-and-forget: the state change is already committed when an
event goes out, so a broker failure is logged and never reaches the caller.
"""
from __future__ import annotations

import enum
import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol

import structlog

from academy_auth.core.config import Settings
from academy_auth.models.user import User

logger = structlog.get_logger(__name__)


class UserEventType(str, enum.Enum):
    USER_REGISTERED = "USER_REGISTERED"
    USER_LOGIN = "USER_LOGIN"
    USER_LOGOUT = "USER_LOGOUT"


class EventPublisher(Protocol):
    def publish(self, topic: str, payload: Dict[str, Any]) -> None: ...


class LoggingEventPublisher:
    """Default sink when no broker is configured."""

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        logger.info("user_event", topic=topic, event_type=payload.get("eventType"), user_id=payload.get("userId"))


class KafkaEventPublisher:
    """Publishes through a producer exposing ``send(topic, value=..., key=...)``.

    The producer is built on first publish, so an unreachable broker surfaces
    as a failed publish instead of failing the request that triggered it.
    Delivery failures reported later by the producer's future are logged.
    """

    def __init__(self, producer_factory: Callable[[], Any]):
        self._producer_factory = producer_factory
        self._producer: Optional[Any] = None
        self._lock = threading.Lock()

    def _get_producer(self) -> Any:
        with self._lock:
            if self._producer is None:
                self._producer = self._producer_factory()
            return self._producer

    def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        key = str(payload.get("userId") or "")
        future = self._get_producer().send(
            topic,
            value=json.dumps(payload, default=str).encode("utf-8"),
            key=key.encode("utf-8"),
        )
        if future is not None and hasattr(future, "add_errback"):
            future.add_errback(_log_delivery_failure, payload.get("eventType"), payload.get("userId"))


def _log_delivery_failure(event_type: Any, user_id: Any, exc: BaseException) -> None:
    logger.warning("event_publish_failed", event_type=event_type, user_id=user_id, error=str(exc))


def build_event_publisher(config: Settings) -> EventPublisher:
    if not config.KAFKA_BOOTSTRAP_SERVERS:
        return LoggingEventPublisher()

    def _producer() -> Any:
        from kafka import KafkaProducer  # needs the "kafka" extra

        return KafkaProducer(
            bootstrap_servers=config.KAFKA_BOOTSTRAP_SERVERS.split(","),
            max_block_ms=config.KAFKA_MAX_BLOCK_MS,
        )

    return KafkaEventPublisher(_producer)


def user_event(event_type: UserEventType, user: User, **extra: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "eventType": event_type.value,
        "userId": user.id,
        "email": user.email,
        "tenantId": user.tenant_id,
        "academyId": user.academy_id,
        "occurredAt": datetime.now(timezone.utc).isoformat(),
    }
    payload.update(extra)
    return payload


class UserEventEmitter:
    def __init__(self, publisher: EventPublisher, topic: str = "user-events"):
        self._publisher = publisher
        self._topic = topic

    def emit(self, event_type: UserEventType, user: User, **extra: Any) -> bool:
        payload = user_event(event_type, user, **extra)
        try:
            self._publisher.publish(self._topic, payload)
        except Exception as exc:  # broker trouble must not undo a committed change
            logger.warning(
                "event_publish_failed",
                event_type=event_type.value,
                user_id=user.id,
                error=str(exc),
            )
            return False
        logger.info("event_published", event_type=event_type.value, user_id=user.id)
        return True
