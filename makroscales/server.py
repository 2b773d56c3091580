"""TCP servers accepting the line software (Linx protocol) and the PLC (weights)."""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass

from .core import Signal

DEFAULT_PLC_PORT = 9090
_CHUNK = 65536


def encode_response(text: str) -> bytes:
    """Encode a reply for the line software: UTF-16LE followed by a CR code unit."""
    return text.encode("utf-16-le") + b"\r\x00"


def hex_dump(data: bytes) -> str:
    """Upper-case hex bytes separated by single spaces."""
    return " ".join(f"{byte:02X}" for byte in data)


def _parse_port(text: str) -> int | None:
    try:
        port = int(text)
    except ValueError:
        return None
    return port if 0 < port <= 65535 else None


@dataclass(frozen=True)
class _Role:
    title: str
    data_label: str
    connected: str
    disconnected: str


_MAKROLINE = _Role("ПО Makroline", "PO Makroline", "Подключено ПО Makroline", "Отключено ПО Makroline")
_PLC = _Role("ПЛК", "PLC", "Подключен ПЛК", "Отключен ПЛК")


def _peer_info(writer: asyncio.StreamWriter) -> str:
    peer = writer.get_extra_info("peername")
    if isinstance(peer, tuple) and len(peer) >= 2:
        return f"{peer[0]}:{peer[1]}"
    return str(peer)


class BridgeServer:
    """Listens for one line-software client and one PLC, relaying their data as signals."""

    def __init__(self, plc_port: int = DEFAULT_PLC_PORT) -> None:
        self.log_message = Signal()
        self.connection_changed = Signal()
        self.command_received = Signal()
        self.plc_data_received = Signal()

        self.ip = ""
        self.port = ""
        self.plc_port = plc_port
        self.queue_out: deque[bytes] = deque()

        self._servers: dict[_Role, asyncio.AbstractServer | None] = {_MAKROLINE: None, _PLC: None}
        self._peers: dict[_Role, asyncio.StreamWriter | None] = {_MAKROLINE: None, _PLC: None}

    def _log(self, text: str) -> None:
        self.log_message.emit(text)

    @property
    def is_listening(self) -> bool:
        return any(server is not None and server.is_serving() for server in self._servers.values())

    def set_connection_params(self, ip: str, port: str | int) -> None:
        port = str(port)
        if self.ip == ip and self.port == port:
            return
        self.ip = ip
        self.port = port
        self._log(f"[Server] Параметры подключения: {ip} - ПО: {port}, ПЛК: {self.plc_port}")

    async def start_server(self) -> None:
        """Restart both listeners on the configured address."""
        self.disconnect_server()

        makroline_port = _parse_port(self.port)
        if makroline_port is None:
            self._log("[Server] Неверный порт для ПО Makroline")
            return

        await self._listen(_MAKROLINE, makroline_port)
        await self._listen(_PLC, self.plc_port)

    async def _listen(self, role: _Role, port: int) -> None:
        async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            await self._serve(role, reader, writer)

        try:
            self._servers[role] = await asyncio.start_server(handle, self.ip, port)
        except OSError as exc:
            self._log(f"[Server] Ошибка запуска сервера {role.title}: {exc}")
        else:
            self._log(f"[Server] Сервер {role.title} запущен на {self.ip}:{port}")

    async def _serve(
        self, role: _Role, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        info = _peer_info(writer)
        if self._peers[role] is not None:
            self._log(f"[Server] Отклонено подключение {role.title} от {info} - уже подключено")
            writer.close()
            return

        self._peers[role] = writer
        self._log(f"[Server] {role.connected}: {info}")
        self.connection_changed.emit(True)

        try:
            while True:
                data = await reader.read(_CHUNK)
                if not data or self._peers[role] is not writer:
                    break
                self._on_data(role, data)
        except OSError:
            pass
        finally:
            if self._peers[role] is writer:
                self._log(f"[Server] {role.disconnected}: {info}")
                self._peers[role] = None
                writer.close()
                if all(peer is None for peer in self._peers.values()):
                    self.connection_changed.emit(False)

    def _on_data(self, role: _Role, data: bytes) -> None:
        if role is _MAKROLINE:
            text = data[: len(data) // 2 * 2].decode("utf-16-le", errors="replace")
        else:
            text = data.decode("utf-8", errors="replace")
        self._log(f"[Server] Получено от {role.data_label}: {text} (HEX: {hex_dump(data)})")
        if role is _MAKROLINE:
            self.command_received.emit(data)
        else:
            self.plc_data_received.emit(data)

    def response_makroline(self, response: str | bytes) -> None:
        """Send a reply to the connected line software."""
        writer = self._peers[_MAKROLINE]
        if writer is None or writer.is_closing():
            self._log("[MakrolineWorker] Сокет не подключен")
            return

        text = response.decode("utf-8", errors="replace") if isinstance(response, bytes) else response
        payload = encode_response(text)
        self._log(
            f"[MakrolineWorker] Ответ на команду: {text.strip()} (HEX: {hex_dump(payload)})"
        )
        self.queue_out.append(payload)
        while self.queue_out and not writer.is_closing():
            writer.write(self.queue_out.popleft())

    def disconnect_server(self) -> None:
        """Stop both listeners and drop any connected peers."""
        for role, server in self._servers.items():
            if server is not None:
                server.close()
                self._servers[role] = None

        for role, writer in self._peers.items():
            if writer is not None:
                self._peers[role] = None
                writer.transport.abort()

        self.connection_changed.emit(False)
        self._log("[Server] Все серверы остановлены, подключения закрыты")