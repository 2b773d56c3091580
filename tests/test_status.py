import pytest

from makroscales.status import (
    CONNECTED_STYLE,
    DISCONNECTED_STYLE,
    ConnectionStatus,
    indicator_style,
)


def test_indicator_style_colours():
    assert "#2ecc71" in indicator_style(True)
    assert "#e74c3c" in indicator_style(False)
    assert indicator_style(True) == CONNECTED_STYLE
    assert indicator_style(False) == DISCONNECTED_STYLE


def test_initially_disconnected():
    status = ConnectionStatus()
    assert status.server_connected is False
    assert status.client_connected is False
    assert status.server_style == DISCONNECTED_STYLE
    assert status.client_style == DISCONNECTED_STYLE


def test_set_server_status_updates_display():
    status = ConnectionStatus()
    seen = []
    status.display_changed.connect(lambda s, c: seen.append((s, c)))
    status.set_server_status(True)
    assert status.server_connected is True
    assert seen == [(CONNECTED_STYLE, DISCONNECTED_STYLE)]


def test_set_client_status_updates_display():
    status = ConnectionStatus()
    seen = []
    status.display_changed.connect(lambda s, c: seen.append((s, c)))
    status.set_client_status(True)
    assert status.client_connected is True
    assert seen == [(DISCONNECTED_STYLE, CONNECTED_STYLE)]


@pytest.mark.parametrize("connected", [True, False])
def test_report_server_status(connected):
    status = ConnectionStatus()
    status.set_server_status(connected)
    reported = []
    status.server_status_changed.connect(reported.append)
    status.report_server_status()
    assert reported == [connected]


@pytest.mark.parametrize("connected", [True, False])
def test_report_client_status(connected):
    status = ConnectionStatus()
    status.set_client_status(connected)
    reported = []
    status.client_status_changed.connect(reported.append)
    status.report_client_status()
    assert reported == [connected]


def test_reset_status():
    status = ConnectionStatus()
    status.set_server_status(True)
    status.set_client_status(True)
    status.reset_status()
    assert (status.server_connected, status.client_connected) == (False, False)
    assert status.server_style == DISCONNECTED_STYLE


def _record_requests(status):
    fired = []
    status.start_server_requested.connect(lambda: fired.append("start_server"))
    status.start_client_requested.connect(lambda: fired.append("start_client"))
    status.stop_server_requested.connect(lambda: fired.append("stop_server"))
    status.stop_client_requested.connect(lambda: fired.append("stop_client"))
    return fired


def test_request_start_server_fires_only_its_signal():
    status = ConnectionStatus()
    fired = _record_requests(status)
    status.request_start_server()
    assert fired == ["start_server"]


def test_request_start_client_fires_only_its_signal():
    status = ConnectionStatus()
    fired = _record_requests(status)
    status.request_start_client()
    assert fired == ["start_client"]


def test_request_stop_server_fires_only_its_signal():
    status = ConnectionStatus()
    fired = _record_requests(status)
    status.request_stop_server()
    assert fired == ["stop_server"]


def test_request_stop_client_fires_only_its_signal():
    status = ConnectionStatus()
    fired = _record_requests(status)
    status.request_stop_client()
    assert fired == ["stop_client"]


def test_requests_leave_connection_state_unchanged():
    status = ConnectionStatus()
    status.set_server_status(True)
    status.request_stop_server()
    status.request_stop_client()
    assert (status.server_connected, status.client_connected) == (True, False)