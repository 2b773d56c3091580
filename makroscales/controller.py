"""Wiring of the bridge, the network endpoints and the operator-facing state."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from .bridge import LinxCabBridge
from .client import PrinterClient
from .core import SharedState
from .counters import CountersBoard
from .logs import LogBook
from .server import DEFAULT_PLC_PORT, BridgeServer
from .settings import ConnectionSettings, SettingsStore
from .status import ConnectionStatus

APP_NAME = "MakroScales"


class AppController:
    """Owns every component, connects their signals and starts or stops the links."""

    def __init__(
        self,
        store: SettingsStore | None = None,
        plc_port: int = DEFAULT_PLC_PORT,
    ) -> None:
        self.store = store if store is not None else SettingsStore()
        self.state = SharedState()

        self.home = ConnectionStatus()
        self.counters = CountersBoard()
        self.logs = LogBook()

        self.bridge = LinxCabBridge(self.state)
        self.client = PrinterClient()
        self.server = BridgeServer(plc_port=plc_port)

        self.settings = ConnectionSettings()
        self._initialized = False
        self._tasks: set[asyncio.Task[None]] = set()

    def initialize(self) -> None:
        """Load the settings, hand them to the endpoints and connect all signals."""
        if self._initialized:
            raise RuntimeError("controller is already initialized")
        self.settings = self.store.load()
        self._apply_settings()
        self._connect_signals()
        self._initialized = True

    def _apply_settings(self) -> None:
        self.server.set_connection_params(self.settings.server_ip, str(self.settings.server_port))
        self.client.set_connection_params(self.settings.client_ip, str(self.settings.client_port))

    def _connect_signals(self) -> None:
        bridge, client, server, home, counters = (
            self.bridge,
            self.client,
            self.server,
            self.home,
            self.counters,
        )

        for source in (client.log_message, server.log_message, bridge.log_message):
            source.connect(self.logs.add_log_message)

        server.command_received.connect(bridge.process_linx_command)
        server.plc_data_received.connect(bridge.set_weight_from_plc)

        home.start_server_requested.connect(lambda: self._spawn(self.start_server))
        home.start_client_requested.connect(lambda: self._spawn(self.start_client))
        home.stop_server_requested.connect(self.stop_server)
        home.stop_client_requested.connect(self.stop_client)

        server.connection_changed.connect(home.set_server_status)
        client.connection_changed.connect(home.set_client_status)
        bridge.check_server_status.connect(home.report_server_status)
        bridge.check_client_status.connect(home.report_client_status)
        home.client_status_changed.connect(bridge.update_client_status)
        home.server_status_changed.connect(bridge.update_server_status)

        bridge.update_display_weight_counter.connect(counters.set_last_weight)
        bridge.update_display_buffer_codes_count.connect(counters.set_buffer_codes_count)
        client.update_display_printed_counter.connect(counters.add_printed_count)
        bridge.update_display_total_count_counter.connect(counters.add_total_count)

        self.store.settings_saved.connect(self.on_settings_saved)

        bridge.command_to_printer.connect(client.send_command_printer)
        bridge.response_to_makroline.connect(server.response_makroline)
        client.successful_printed_in_makroline.connect(server.response_makroline)

    def _spawn(self, factory: Callable[[], Awaitable[None]]) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(factory())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def on_settings_saved(self, settings: ConnectionSettings) -> None:
        """Adopt freshly saved settings and pass them on to the endpoints."""
        self.settings = settings
        self._apply_settings()

    async def start_server(self) -> None:
        await self.server.start_server()

    def stop_server(self) -> None:
        self.server.disconnect_server()
        self.home.set_server_status(False)

    async def start_client(self) -> None:
        self.client.set_connection_params(self.settings.client_ip, str(self.settings.client_port))
        await self.client.connect_to_server()

    def stop_client(self) -> None:
        self.client.disconnect_from_server()
        self.home.set_client_status(False)

    async def _serve_forever(self) -> None:
        self.initialize()
        await self.start_server()
        await self.start_client()
        try:
            await asyncio.Event().wait()
        finally:
            self.stop_client()
            self.stop_server()


def main(argv: list[str] | None = None) -> int:
    """Run the bridge until interrupted, printing log lines to standard output."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME.lower(),
        description="Bridge the line software's Linx commands and PLC weights to a CAB printer.",
    )
    parser.add_argument("--config", type=Path, default=None, help="settings file")
    parser.add_argument("--plc-port", type=int, default=DEFAULT_PLC_PORT, help="PLC listening port")
    args = parser.parse_args(argv)

    controller = AppController(SettingsStore(args.config), plc_port=args.plc_port)
    controller.logs.message_added.connect(lambda channel, line: print(line, flush=True))
    try:
        asyncio.run(controller._serve_forever())
    except KeyboardInterrupt:
        pass
    return 0