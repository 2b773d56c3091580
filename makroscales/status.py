"""Connection status of the line server and the printer client, plus start/stop requests."""

from __future__ import annotations

from .core import Signal

CONNECTED_STYLE = (
    "border-radius: 30px;"
    "background-color: #2ecc71;"
    "border: 2px solid #27ae60;"
)
DISCONNECTED_STYLE = (
    "border-radius: 30px;"
    "background-color: #e74c3c;"
    "border: 2px solid #c0392b;"
)


def indicator_style(connected: bool) -> str:
    """Style of a status indicator: green when connected, red otherwise."""
    return CONNECTED_STYLE if connected else DISCONNECTED_STYLE


class ConnectionStatus:
    """Tracks whether the server and the client are connected and relays operator requests."""

    def __init__(self) -> None:
        self.server_connected = False
        self.client_connected = False

        self.start_server_requested = Signal()
        self.start_client_requested = Signal()
        self.stop_server_requested = Signal()
        self.stop_client_requested = Signal()
        self.server_status_changed = Signal()
        self.client_status_changed = Signal()
        self.display_changed = Signal()

    @property
    def server_style(self) -> str:
        return indicator_style(self.server_connected)

    @property
    def client_style(self) -> str:
        return indicator_style(self.client_connected)

    def _refresh(self) -> None:
        self.display_changed.emit(self.server_style, self.client_style)

    def set_server_status(self, connected: bool) -> None:
        self.server_connected = connected
        self._refresh()

    def set_client_status(self, connected: bool) -> None:
        self.client_connected = connected
        self._refresh()

    def report_server_status(self) -> None:
        """Publish the current server status on ``server_status_changed``."""
        self.server_status_changed.emit(self.server_connected)

    def report_client_status(self) -> None:
        """Publish the current client status on ``client_status_changed``."""
        self.client_status_changed.emit(self.client_connected)

    def reset_status(self) -> None:
        self.server_connected = False
        self.client_connected = False
        self._refresh()

    def request_start_server(self) -> None:
        self.start_server_requested.emit()

    def request_start_client(self) -> None:
        self.start_client_requested.emit()

    def request_stop_server(self) -> None:
        self.stop_server_requested.emit()

    def request_stop_client(self) -> None:
        self.stop_client_requested.emit()