"""TCP link to the CAB label printer."""

from __future__ import annotations

import asyncio
from collections import deque

from .core import CabCommand, Signal

PRINT_CONFIRMATION = "PRC"


def _parse_port(text: str) -> int | None:
    try:
        port = int(text)
    except ValueError:
        return None
    return port if 1 <= port <= 65535 else None


class PrinterClient:
    """Connects to the printer and forwards completed CAB jobs to it."""

    def __init__(self) -> None:
        self.connection_changed = Signal()
        self.log_message = Signal()
        self.successful_printed_in_makroline = Signal()
        self.update_display_printed_counter = Signal()

        self.ip = ""
        self.port = ""
        self.is_connected = False
        self.print_queue: deque[bytes] = deque()
        self._writer: asyncio.StreamWriter | None = None

    def _log(self, text: str) -> None:
        self.log_message.emit(text)

    def set_connection_params(self, ip: str, port: str | int) -> None:
        port = str(port)
        if self.ip == ip and self.port == port:
            return
        self.ip = ip
        self.port = port
        self._log(f"[Client] Параметры подключения установлены ip: {ip} port: {port}")

    async def connect_to_server(self) -> None:
        """Open a connection to the configured printer, replacing any previous one."""
        if not self.ip or not self.port:
            self._log("[Client] IP или порт не установлены!")
            return
        port = _parse_port(self.port)
        if port is None:
            self._log("[Client] Неверный номер порта!")
            return

        if self._writer is not None:
            self._writer.close()
            self._writer = None

        self._log(f"[Client] Подключаемся к {self.ip}, {self.port}")
        try:
            _, writer = await asyncio.open_connection(self.ip, port)
        except OSError as exc:
            self.is_connected = False
            self._log(f"[Client] Ошибка подключения: {exc}")
            self.connection_changed.emit(False)
            return

        self._writer = writer
        self.is_connected = True
        self._log("[Client] Успешно подключено к принтеру!")
        self.connection_changed.emit(True)

    def disconnect_from_server(self) -> None:
        writer = self._writer
        if writer is not None and not writer.is_closing():
            writer.close()
            self._log("[Client] отключение от сокета")
            self.connection_changed.emit(False)
            self.is_connected = False
        else:
            self._log("[Client] сокет уже отключён")

    def send_command_printer(self, command: bytes, command_type: CabCommand) -> None:
        """Accept a command from the bridge.

        Only label jobs travel over the printer link; the control commands
        (start, stop, clear, status) are acknowledged without sending anything.
        """
        if command_type is not CabCommand.ADD_CODE:
            return
        self.print_queue.append(command)
        self._log(
            f"[Client] Код добавлен:\n {command.decode('utf-8', errors='replace')}"
            f" / в очереди {len(self.print_queue)}"
        )
        self._fill_printer_buffer()

    def _fill_printer_buffer(self) -> None:
        if not self.is_connected:
            self._log("[Client] Сокет не подключен, не могу отправить в принтер")
            return

        while self.print_queue:
            command = self.print_queue.popleft()
            writer = self._writer
            if writer is None or writer.is_closing():
                self._log("[Client] Ошибка отправки команды в принтер")
            else:
                writer.write(command)
                self._log(
                    "[Client] Команда отправлена в принтер:\n"
                    + command.decode("utf-8", errors="replace")
                )
            self.successful_printed_in_makroline.emit(PRINT_CONFIRMATION)