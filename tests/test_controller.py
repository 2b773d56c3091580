import asyncio
import socket

import pytest

from makroscales.controller import AppController, main
from makroscales.logs import LogChannel
from makroscales.server import encode_response
from makroscales.settings import (
    DEFAULT_CLIENT_IP,
    DEFAULT_CLIENT_PORT,
    DEFAULT_SERVER_IP,
    DEFAULT_SERVER_PORT,
    ConnectionSettings,
    SettingsStore,
)


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _controller(tmp_path, settings=None, plc_port=None):
    store = SettingsStore(tmp_path / "settings.ini")
    if settings is not None:
        store.save(settings)
    controller = AppController(store, plc_port=plc_port if plc_port else _free_port())
    controller.initialize()
    return controller


def _utf16(text: str) -> bytes:
    return text.encode("utf-16-le")


def test_initialize_applies_default_settings(tmp_path):
    controller = _controller(tmp_path)
    assert controller.settings == ConnectionSettings()
    assert controller.server.ip == DEFAULT_SERVER_IP
    assert controller.server.port == str(DEFAULT_SERVER_PORT)
    assert controller.client.ip == DEFAULT_CLIENT_IP
    assert controller.client.port == str(DEFAULT_CLIENT_PORT)


def test_initialize_twice_raises(tmp_path):
    controller = _controller(tmp_path)
    with pytest.raises(RuntimeError):
        controller.initialize()


def test_saved_settings_reach_endpoints(tmp_path):
    controller = _controller(tmp_path)
    new = ConnectionSettings("10.0.0.1", 5000, "10.0.0.2", 6000)
    controller.store.save(new)
    assert controller.settings == new
    assert controller.server.ip == "10.0.0.1"
    assert controller.server.port == "5000"
    assert controller.client.ip == "10.0.0.2"
    assert controller.client.port == "6000"


def test_stop_server_clears_status(tmp_path):
    controller = _controller(tmp_path)
    controller.home.set_server_status(True)
    controller.stop_server()
    assert controller.home.server_connected is False


def test_stop_client_clears_status(tmp_path):
    controller = _controller(tmp_path)
    controller.home.set_client_status(True)
    controller.stop_client()
    assert controller.home.client_connected is False


def test_command_reaches_bridge_and_reply_goes_to_server(tmp_path):
    controller = _controller(tmp_path)
    replies = []
    controller.bridge.response_to_makroline.connect(replies.append)
    controller.server.command_received.emit(_utf16("GST\r"))
    assert replies == ["STS|0|0|DemoJob|0|0|"]
    system = controller.logs.entries(LogChannel.SYSTEM)
    assert any("[MakrolineWorker] Сокет не подключен" in line for line in system)


def test_transform_depends_on_relayed_status(tmp_path):
    controller = _controller(tmp_path)
    assert controller.bridge.transform_linx_to_cab("SHD|code=ABC") == b""
    controller.home.set_server_status(True)
    job = controller.bridge.transform_linx_to_cab("SHD|code=ABC")
    assert job.startswith(b"R code;ABC\r\n")
    assert controller.bridge.server_connected is True


def test_weight_completes_job_and_updates_counters(tmp_path):
    controller = _controller(tmp_path)
    controller.home.set_server_status(True)
    controller.home.set_client_status(True)
    controller.server.command_received.emit(_utf16("SHD|code=XYZ\r"))
    assert controller.counters.buffer_codes_count == 1

    controller.server.plc_data_received.emit(b"125.5")
    assert controller.counters.last_weight == 125.5
    assert controller.counters.total_count == 1
    assert controller.counters.buffer_codes_count == 0
    assert len(controller.client.print_queue) == 1
    assert b"R weight;125.5\r\n" in controller.client.print_queue[0]


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit) as info:
        main(["--no-such-option"])
    assert info.value.code == 2


@pytest.mark.asyncio
async def test_server_answers_line_software(tmp_path):
    port = _free_port()
    controller = _controller(
        tmp_path, ConnectionSettings("127.0.0.1", port, "127.0.0.1", 9100)
    )
    await controller.start_server()
    try:
        assert controller.server.is_listening
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        writer.write(_utf16("GST\r"))
        await writer.drain()
        expected = encode_response("STS|0|0|DemoJob|0|0|")
        reply = await asyncio.wait_for(reader.readexactly(len(expected)), 5)
        assert reply == expected
        assert controller.home.server_connected is True
        writer.close()
    finally:
        controller.stop_server()
    assert controller.server.is_listening is False
    assert controller.home.server_connected is False


@pytest.mark.asyncio
async def test_start_request_from_status_starts_server(tmp_path):
    port = _free_port()
    controller = _controller(
        tmp_path, ConnectionSettings("127.0.0.1", port, "127.0.0.1", 9100)
    )
    controller.home.request_start_server()
    try:
        for _ in range(100):
            if controller.server.is_listening:
                break
            await asyncio.sleep(0.01)
        assert controller.server.is_listening
    finally:
        controller.home.request_stop_server()
    assert controller.server.is_listening is False


@pytest.mark.asyncio
async def test_client_connects_to_printer(tmp_path):
    received = asyncio.Queue()

    async def printer(reader, writer):
        received.put_nowait(await reader.read(1024))
        writer.close()

    printer_server = await asyncio.start_server(printer, "127.0.0.1", 0)
    printer_port = printer_server.sockets[0].getsockname()[1]
    controller = _controller(
        tmp_path, ConnectionSettings("127.0.0.1", 8080, "127.0.0.1", printer_port)
    )
    try:
        await controller.start_client()
        assert controller.home.client_connected is True
        assert controller.client.is_connected is True

        controller.client.send_command_printer(b"A1\r\n", controller_add_code())
        data = await asyncio.wait_for(received.get(), 5)
        assert data == b"A1\r\n"

        controller.stop_client()
        assert controller.home.client_connected is False
    finally:
        printer_server.close()
        await printer_server.wait_closed()


def controller_add_code():
    from makroscales.core import CabCommand

    return CabCommand.ADD_CODE