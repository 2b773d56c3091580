"""Translation of Linx TTO commands from the line software into CAB label jobs."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterator
from typing import Callable

from .core import (
    CabCommand,
    CabState,
    LinxCommand,
    LinxState,
    SharedState,
    Signal,
    cab_command_bytes,
    linx_command_from_code,
)

ACK = "ACK"
LABEL_FIELDS = ("name", "batch", "production_datetime", "expiration_datetime")
WEIGHT_PLACEHOLDER = "R weight;0\r\n"

_TRANSITIONS: dict[LinxState, frozenset[LinxState]] = {
    LinxState.SHUTDOWN: frozenset({LinxState.STARTING_UP, LinxState.SHUTTING_DOWN}),
    LinxState.STARTING_UP: frozenset({LinxState.RUNNING, LinxState.SHUTDOWN}),
    LinxState.RUNNING: frozenset({LinxState.OFFLINE, LinxState.SHUTTING_DOWN}),
    LinxState.OFFLINE: frozenset({LinxState.RUNNING, LinxState.SHUTTING_DOWN}),
    LinxState.SHUTTING_DOWN: frozenset({LinxState.SHUTDOWN, LinxState.STARTING_UP}),
}


def _hex_tokens(text: str) -> Iterator[tuple[str, int | None]]:
    """Yield each space-separated token with its byte value, or None if invalid."""
    for token in text.split(" "):
        if not token:
            continue
        value: int | None
        try:
            value = int(token, 16) if "_" not in token else None
        except ValueError:
            value = None
        if value is not None and not 0 <= value <= 0xFF:
            value = None
        yield token, value


def hex_string_to_bytes(text: str) -> bytes:
    """Convert space-separated hex byte tokens to bytes, skipping invalid ones."""
    return bytes(value for _, value in _hex_tokens(text) if value is not None)


def is_valid_state_transition(current: LinxState, target: LinxState) -> bool:
    """Whether the Linx state machine allows moving from ``current`` to ``target``."""
    if current == target:
        return True
    return target in _TRANSITIONS.get(current, frozenset())


def _parse_int(text: str) -> int | None:
    if "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _parse_float(text: str) -> float:
    """Parse a weight; anything unparsable or overflowing reads as zero."""
    if "_" in text:
        return 0.0
    try:
        value = float(text)
    except ValueError:
        return 0.0
    if math.isinf(value) and "inf" not in text.lower():
        return 0.0
    return value


def _split_pair(pair: str) -> tuple[str, str]:
    key, _, value = pair.partition("=")
    return key.strip(), value.strip()


class LinxCabBridge:
    """Receives Linx commands, answers them and queues CAB jobs awaiting a weight."""

    def __init__(self, state: SharedState | None = None, label_template: str = "") -> None:
        self.state = state if state is not None else SharedState()
        self.state.label_template = label_template

        self.command_to_printer = Signal()
        self.response_to_makroline = Signal()
        self.log_message = Signal()
        self.update_display_weight_counter = Signal()
        self.update_display_buffer_codes_count = Signal()
        self.update_display_total_count_counter = Signal()
        self.check_server_status = Signal()
        self.check_client_status = Signal()

        self.pending_cab_queue: deque[bytes] = deque()
        self.makroline_queue: deque[str] = deque()
        self.last_values: dict[str, str] = {name: "" for name in LABEL_FIELDS}
        self.last_raw_code = ""
        self.client_connected = False
        self.server_connected = False

        self._handlers: dict[LinxCommand, Callable[[list[str]], None]] = {
            LinxCommand.PRINT: self._handle_print,
            LinxCommand.REQUEST_STATE: lambda parts: self._handle_request_state(),
            LinxCommand.SELECT_JOB: self._handle_select_job,
            LinxCommand.UPDATE_JOB_NAMED: lambda parts: self._respond("SFS|951744|"),
            LinxCommand.REQUEST_ASYNC_STATE: lambda parts: self._respond(ACK),
            LinxCommand.REQUEST_QUEUE_SIZE: lambda parts: self._handle_request_queue_size(),
            LinxCommand.SET_STATE: self._handle_set_state,
            LinxCommand.ADD_TO_BUFFER: self._handle_add_to_buffer,
            LinxCommand.ADD_TO_QUEUE: self._handle_add_to_buffer,
            LinxCommand.CLEAR_FAULTS: lambda parts: self._handle_clear_faults(),
            LinxCommand.CLEAR_QUEUE: lambda parts: self._handle_clear_queue(),
            LinxCommand.UNKNOWN: lambda parts: self._respond("ERR"),
        }

    def _respond(self, text: str) -> None:
        self.response_to_makroline.emit(text)

    def _log(self, text: str) -> None:
        self.log_message.emit(text)

    def process_linx_command(self, raw: bytes) -> None:
        """Decode a UTF-16 packet of CR-separated commands and handle each one."""
        if not raw:
            self._log("Пустые данные пришли")
            self._respond("ERR|EMPTY_DATA")
            return

        if len(raw) % 2:
            raw = raw + b"\x00"
        text = raw.decode("utf-16-le", errors="replace").strip()
        if not text:
            self._log("Ошибка конвертирования в UTF-16")
            self._respond("ERR|INVALID_UTF16")
            return

        commands = [chunk for chunk in text.split("\r") if chunk]
        if not commands:
            self._log("Не удалось выделить команды из пакета: " + text)
            self._respond("ERR|NO_VALID_COMMANDS")
            return

        self._log(f"[System] В пакете найдено команд: {len(commands)}")

        for chunk in commands:
            command = chunk.strip()
            if not command:
                continue
            self._log("[System] Обработка команды: " + command)
            parts = command.split("|")
            handler = self._handlers.get(linx_command_from_code(parts[0]))
            if handler is not None:
                handler(parts)

    def transform_linx_to_cab(self, command: str) -> bytes:
        """Build a CAB job from a Linx command, reusing remembered field values."""
        if not command:
            return b""
        self.check_server_status.emit()
        self.check_client_status.emit()
        if not self.server_connected and not self.client_connected:
            self._log("[System] Клиент или сервер не подключен")
            return b""

        current_values: dict[str, str] = {}
        current_code = ""
        for part in filter(None, command.split("|")):
            if part.startswith("code="):
                current_code = (
                    part[5:].strip().replace("~d029", "[U:GS]").replace("~1", "[U:FNC1]")
                )
                if current_code:
                    self.last_raw_code = current_code
            elif "=" in part:
                key, value = _split_pair(part)
                current_values[key] = value
                if value:
                    self.last_values[key] = value

        def resolved(name: str) -> str:
            return current_values.get(name) or self.last_values.get(name, "")

        lines: list[str] = []
        code_to_use = current_code or self.last_raw_code
        if code_to_use:
            lines.append(f"R code;{code_to_use}")
        for name in LABEL_FIELDS:
            if name in current_values or self.last_values.get(name):
                lines.append(f"R {name};{resolved(name)}")
        lines.append("R weight;0")
        lines.append("A1")

        final = "".join(line + "\r\n" for line in lines)
        self._log("[System] Сформирована CAB-команда:\n" + final)
        self._log(
            "[System] Использованные значения: "
            f"Код: {code_to_use}, "
            f"Наименование: {resolved('name')}, "
            f"Партия: {resolved('batch')}, "
            f"Дата производства: {resolved('production_datetime')}, "
            f"Срок годности: {resolved('expiration_datetime')}"
        )
        return final.encode("utf-8")

    def set_weight_from_plc(self, data: bytes) -> None:
        """Complete the oldest pending CAB job with the weight and send it to the printer."""
        if not self.client_connected:
            self._log("[System] Нет соединения с клиентом")
            return
        if not data or not self.pending_cab_queue:
            return

        weight_text = data.decode("utf-8", errors="replace").strip()
        self._log("[System] Получен вес от PLC: " + weight_text)
        weight = _parse_float(weight_text)

        job = self.pending_cab_queue.popleft().decode("utf-8", errors="replace")
        job = job.replace(WEIGHT_PLACEHOLDER, f"R weight;{weight_text}\r\n")

        self.command_to_printer.emit(job.encode("utf-8"), CabCommand.ADD_CODE)
        self._log("[System] Отправлена команда на печать с весом: " + weight_text)
        self.update_display_total_count_counter.emit(1)
        self.update_display_buffer_codes_count.emit(len(self.pending_cab_queue))
        self.update_display_weight_counter.emit(weight)

    def handle_printer_state(self, state: CabState) -> None:
        printed = self.state.count_printed
        self._respond(f"STS|3|0|gs1dm|{printed}|{printed}")

    def update_client_status(self, connected: bool) -> None:
        self.client_connected = connected

    def update_server_status(self, connected: bool) -> None:
        self.server_connected = connected

    def change_auto_and_manual_modes(self, checked: bool) -> None:
        self.state.auto_and_manual_modes = checked

    def manual_print(self) -> int:
        """Printing is triggered by the PLC weight; report how many jobs still await one."""
        return len(self.pending_cab_queue)

    def _handle_print(self, parts: list[str]) -> None:
        self._log("[System] Получена команда на печать")
        self.manual_print()

    def _handle_add_to_buffer(self, parts: list[str]) -> None:
        if not parts:
            return
        code = next((part[5:].strip() for part in parts if part.startswith("code=")), "")
        if not code:
            self._log("[System] Не удалось определить код из команды: " + "|".join(parts))
            self._respond("ERR|INVALID_CODE")
            return

        self.makroline_queue.append(code)
        self._log(f"[System] Добавлено кодов: 1, всего в очереди: {len(self.makroline_queue)}")

        self.pending_cab_queue.append(self.transform_linx_to_cab("|".join(parts)))
        self.update_display_buffer_codes_count.emit(len(self.pending_cab_queue))
        self._log("[System] Команда CAB добавлена в очередь и ждёт вес")
        self._respond(ACK)

    def _handle_clear_queue(self) -> None:
        self.makroline_queue.clear()
        self._respond(ACK)

    def _handle_select_job(self, parts: list[str]) -> None:
        job_name = parts[1].strip() if len(parts) > 1 else ""
        self.state.variables.clear()
        for pair in parts[2:]:
            key, value = _split_pair(pair)
            if key:
                self.state.variables[key] = value
        self._log("[System] Задание выбрано: " + job_name)
        self._respond(ACK)

    def _handle_request_state(self) -> None:
        state = self.state
        self._respond(
            f"STS|{int(state.current_status_makroline)}|0|DemoJob|"
            f"{state.batch_count}|{state.total_count}|"
        )

    def _handle_request_queue_size(self) -> None:
        self._respond(f"SRC|{len(self.makroline_queue)}")
        self.update_display_buffer_codes_count.emit(len(self.makroline_queue))

    def _handle_clear_faults(self) -> None:
        text = cab_command_bytes(CabCommand.CLEAR_BUFFERS).decode("latin-1")
        for token, value in _hex_tokens(text):
            if value is None:
                self._log("[System] Invalid hex byte: " + token)
        self.command_to_printer.emit(hex_string_to_bytes(text), CabCommand.CLEAR_BUFFERS)
        self.pending_cab_queue.clear()
        self.makroline_queue.clear()
        self.update_display_buffer_codes_count.emit(len(self.pending_cab_queue))
        self._respond(ACK)

    def _handle_set_state(self, parts: list[str]) -> None:
        if len(parts) < 2:
            self._respond("[System] ERS|Неверный формат команды SST")
            return
        target = _parse_int(parts[1])
        if target is None or not 0 <= target <= 4:
            self._respond("[System] ERS|Недопустимое значение состояния")
            return

        requested = LinxState(target)
        if not is_valid_state_transition(self.state.current_status_makroline, requested):
            self._respond("[System] ERS|Недопустимый переход состояний")
            return

        if requested is LinxState.RUNNING:
            self.state.current_status_cab = CabState.START
            self.command_to_printer.emit(
                cab_command_bytes(CabCommand.START_PRINT), CabCommand.START_PRINT
            )
        elif requested in (LinxState.SHUTDOWN, LinxState.SHUTTING_DOWN, LinxState.OFFLINE):
            self.state.current_status_cab = CabState.STOP
            self.command_to_printer.emit(
                cab_command_bytes(CabCommand.STOP_PRINT), CabCommand.STOP_PRINT
            )

        self.state.current_status_makroline = requested
        self._respond(ACK)