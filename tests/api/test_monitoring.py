"""
Tests for MongoDB connection-state logging.
"""

from unittest.mock import MagicMock

from structlog.testing import capture_logs

from api.monitoring import ConnectionStateLogger


def topology_event(reachable):
    description = MagicMock()
    description.has_readable_server.return_value = reachable
    description.has_writable_server.return_value = reachable
    description.topology_type_name = "Single"
    event = MagicMock()
    event.new_description = description
    return event


def test_connected_then_disconnected():
    listener = ConnectionStateLogger()

    with capture_logs() as logs:
        listener.description_changed(topology_event(reachable=True))
        listener.description_changed(topology_event(reachable=True))
        listener.description_changed(topology_event(reachable=False))

    assert [(entry["event"], entry["log_level"]) for entry in logs] == [
        ("MongoDB connected", "info"),
        ("MongoDB disconnected", "warning"),
    ]
    assert listener.connected is False


def test_unreachable_at_start_is_silent():
    listener = ConnectionStateLogger()

    with capture_logs() as logs:
        listener.description_changed(topology_event(reachable=False))

    assert logs == []


def test_heartbeat_failure_logged_as_error():
    listener = ConnectionStateLogger()
    event = MagicMock()
    event.connection_id = ("localhost", 27017)
    event.reply = ConnectionRefusedError("connection refused")

    with capture_logs() as logs:
        listener.failed(event)

    assert logs[0]["event"] == "MongoDB connection error"
    assert logs[0]["log_level"] == "error"
    assert logs[0]["address"] == "localhost:27017"


def test_close_after_connect_logs_disconnect():
    listener = ConnectionStateLogger()
    listener.description_changed(topology_event(reachable=True))

    with capture_logs() as logs:
        listener.closed(MagicMock())

    assert logs[0]["event"] == "MongoDB disconnected"
    assert listener.connected is False
