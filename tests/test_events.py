"""Tests for event publishing."""

import json

from academy_auth.core.config import Settings
from academy_auth.models.user import Role, User, UserStatus
from academy_auth.services.events import (
    KafkaEventPublisher,
    LoggingEventPublisher,
    UserEventEmitter,
    UserEventType,
    build_event_publisher,
    user_event,
)


class FakeProducer:
    future = None

    def __init__(self):
        self.sent = []

    def send(self, topic, value=None, key=None):
        self.sent.append((topic, value, key))
        return self.future


class FakeFuture:
    def __init__(self):
        self.errbacks = []

    def add_errback(self, fn, *args):
        self.errbacks.append((fn, args))

    def fail(self, exc):
        for fn, args in self.errbacks:
            fn(*args, exc)


def _user():
    return User(id=11, name="Caio", email="caio@academy.com", hashed_password="x",
                role=Role.PARENT, status=UserStatus.ACTIVE, tenant_id="tenant-z", academy_id=None)


def test_payload_shape():
    payload = user_event(UserEventType.USER_LOGOUT, _user())

    assert payload["eventType"] == "USER_LOGOUT"
    assert payload["userId"] == 11
    assert payload["email"] == "caio@academy.com"
    assert payload["tenantId"] == "tenant-z"
    assert payload["academyId"] is None
    assert "occurredAt" in payload


def test_kafka_publisher_sends_json_keyed_by_user():
    producer = FakeProducer()

    KafkaEventPublisher(lambda: producer).publish("user-events", user_event(UserEventType.USER_LOGIN, _user()))

    [(topic, value, key)] = producer.sent
    assert topic == "user-events"
    assert key == b"11"
    assert json.loads(value.decode("utf-8"))["eventType"] == "USER_LOGIN"


def test_emitter_uses_configured_topic(publisher):
    emitter = UserEventEmitter(publisher, topic="academy.user-events")

    assert emitter.emit(UserEventType.USER_LOGIN, _user()) is True
    assert publisher.published[0][0] == "academy.user-events"


def test_emitter_swallows_publish_failures(publisher):
    publisher.fail = True

    assert UserEventEmitter(publisher).emit(UserEventType.USER_LOGIN, _user()) is False


def test_without_broker_events_go_to_the_log():
    publisher = build_event_publisher(Settings(KAFKA_BOOTSTRAP_SERVERS=None))

    assert isinstance(publisher, LoggingEventPublisher)
    publisher.publish("user-events", user_event(UserEventType.USER_LOGIN, _user()))


def test_kafka_producer_is_built_once_on_first_publish():
    built = []

    def factory():
        built.append(FakeProducer())
        return built[-1]

    publisher = KafkaEventPublisher(factory)
    assert built == []

    publisher.publish("user-events", user_event(UserEventType.USER_LOGIN, _user()))
    publisher.publish("user-events", user_event(UserEventType.USER_LOGOUT, _user()))

    assert len(built) == 1
    assert len(built[0].sent) == 2


def test_unreachable_broker_is_a_failed_emit_not_an_error():
    def factory():
        raise ConnectionError("NoBrokersAvailable")

    emitter = UserEventEmitter(KafkaEventPublisher(factory))

    assert emitter.emit(UserEventType.USER_LOGIN, _user()) is False


def test_late_delivery_failure_is_logged(monkeypatch):
    from academy_auth.services import events

    logged = []

    class Recorder:
        def warning(self, event, **kw):
            logged.append((event, kw))

        def info(self, event, **kw):
            pass

    monkeypatch.setattr(events, "logger", Recorder())
    producer = FakeProducer()
    producer.future = FakeFuture()

    assert UserEventEmitter(KafkaEventPublisher(lambda: producer)).emit(UserEventType.USER_LOGIN, _user()) is True
    producer.future.fail(TimeoutError("delivery timed out"))

    [(event, fields)] = logged
    assert event == "event_publish_failed"
    assert fields["event_type"] == "USER_LOGIN"
    assert fields["user_id"] == 11
    assert "delivery timed out" in fields["error"]


def test_with_broker_configured_nothing_connects_until_publish():
    publisher = build_event_publisher(Settings(KAFKA_BOOTSTRAP_SERVERS="broker-1:9092,broker-2:9092"))

    assert isinstance(publisher, KafkaEventPublisher)
    assert publisher._producer is None
