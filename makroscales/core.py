"""Shared enumerations, protocol tables, runtime state and a tiny signal type."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable


class Signal:
    """A list of callables invoked in connection order by :meth:`emit`."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        """Remove one connection of ``slot``; raise ValueError if absent."""
        try:
            self._slots.remove(slot)
        except ValueError:
            raise ValueError(f"slot {slot!r} is not connected") from None

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)

    def __len__(self) -> int:
        return len(self._slots)


class PrinterType(Enum):
    UNKNOWN = "Не выбран"
    RYNAN = "Rynan_R20"
    TSC = "TSC (Emulator Linx TTO)"
    DOCOD = "Docod TIJ T210"
    CAB = "Cab"

    @property
    def label(self) -> str:
        return self.value


class CodeField(Enum):
    """GS1 application identifiers used in marking codes."""

    FIELD_01 = ("01", 14)
    FIELD_13 = ("13", 0)
    FIELD_21 = ("21", 13)
    FIELD_93 = ("93", 4)
    FIELD_94 = ("94", 0)

    @property
    def prefix(self) -> str:
        return self.value[0]

    @property
    def length(self) -> int:
        return self.value[1]

    @property
    def field_name(self) -> str:
        return f"field{self.prefix}"

    @classmethod
    def from_prefix(cls, prefix: str) -> CodeField:
        for member in cls:
            if member.prefix == prefix:
                return member
        raise ValueError(f"unknown code field prefix: {prefix!r}")


class LinxState(IntEnum):
    SHUTDOWN = 0
    STARTING_UP = 1
    SHUTTING_DOWN = 2
    RUNNING = 3
    OFFLINE = 4


class LinxCommand(Enum):
    """Linx TTO commands keyed by their three-letter wire code."""

    UNKNOWN = "NAN"
    PRINT = "PRN"
    SELECT_JOB = "SLA"
    UPDATE_JOB_NAMED = "JDA"
    REQUEST_ASYNC_STATE = "EAN"
    REQUEST_QUEUE_SIZE = "SRC"
    REQUEST_STATE = "GST"
    SET_STATE = "SST"
    ADD_TO_BUFFER = "SHD"
    STATE_RESPONSE = "STS"
    PRINT_COMPLETE = "PRC"
    ERROR_RESPONSE = "ERS"
    JOB_RESPONSE = "JOB"
    GET_CURRENT_ERROR = "GFT"
    GET_FREE_SPACE = "SFS"
    GET_JOB_VARS = "GJF"
    GET_JOB_LIST = "GJL"
    JOB_LIST_RESPONSE = "JBL"
    UPDATE_FIELDS_SERIAL = "SCF"
    FAULT_RESPONSE = "FLT"
    CLEAR_FAULTS = "CAF"
    CLEAR_QUEUE = "SCB"
    SET_QUEUE_FIELDS = "SHO"
    ADD_TO_QUEUE = "SDO"

    @property
    def code(self) -> str:
        return self.value


class CabState(IntEnum):
    STOP = 0
    START = 1


class CabStatus(Enum):
    """Error characters reported by a CAB printer."""

    NO_ERROR = "-"
    APPLICATOR_NOT_UP = "a"
    APPLICATOR_NOT_DOWN = "b"
    VACUUM_PLATE_EMPTY = "c"
    LABEL_NOT_DEPOSIT = "d"
    HOST_ERROR = "e"
    REFLECTIVE_SENSOR_BLOCKED = "f"
    TAMP_PAD_90_ERROR = "g"
    TAMP_PAD_0_ERROR = "h"
    TABLE_NOT_FRONT = "i"
    TABLE_NOT_REAR = "j"
    HEAD_LIFTED = "k"
    HEAD_DOWN = "l"
    SCAN_RESULT_NEGATIVE = "m"
    NETWORK_ERROR = "n"
    NO_AIR_ERROR = "o"
    RFID_ERROR = "r"
    SYSTEM_FAULT = "s"
    USB_ERROR = "u"
    APPLICATOR_ERROR = "A"
    BARCODE_DATA_ERROR = "B"
    MEMORY_CARD_ERROR = "C"
    PRINTHEAD_OPEN = "D"
    SYNCHRONIZATION_ERROR = "E"
    OUT_OF_RIBBON = "F"
    PPP_RELOAD_REQUIRED = "G"
    HEATING_VOLTAGE_PROBLEM = "H"
    CUTTER_JAMMED = "M"
    LABEL_MATERIAL_TOO_THICK = "N"
    OUT_OF_MEMORY = "O"
    OUT_OF_PAPER = "P"
    RIBBON_IN_THERMAL_DIRECT_MODE = "R"
    RIBBONSAVER_MALFUNCTION = "S"
    INPUT_BUFFER_OVERFLOW = "V"
    PRINTHEAD_OVERHEATED = "W"
    EXTERNAL_IO_ERROR = "X"
    PRINTHEAD_ERROR = "Y"
    PRINTHEAD_DAMAGED = "Z"


class CabCommand(Enum):
    ADD_CODE = "add_code"
    CLEAR_BUFFERS = "clear_buffers"
    START_PRINT = "start_print"
    STOP_PRINT = "stop_print"
    REQUEST_STATUS = "request_status"


_CAB_COMMAND_BYTES: dict[CabCommand, bytes] = {
    CabCommand.START_PRINT: bytes.fromhex("1B0200111B03B4"),
    CabCommand.STOP_PRINT: bytes.fromhex("1B0200121B03B3"),
    CabCommand.REQUEST_STATUS: bytes.fromhex("1B0200141B03B1"),
    CabCommand.CLEAR_BUFFERS: b"CLEAR",
}


def linx_command_from_code(code: str) -> LinxCommand:
    """Look up a Linx command by its code, case-insensitively; UNKNOWN if absent."""
    try:
        return LinxCommand(code.upper())
    except ValueError:
        return LinxCommand.UNKNOWN


def cab_command_bytes(command: CabCommand) -> bytes:
    """Fixed wire bytes for a CAB command; empty for commands carrying data."""
    return _CAB_COMMAND_BYTES.get(command, b"")


@dataclass
class SharedState:
    """Counters and modes shared between the bridge components."""

    batch_count: int = 0
    total_count: int = 0
    count_printed: int = 0
    count_buffer_in_printer: int = 0
    id_label: int = 0
    auto_and_manual_modes: bool = False
    length_code: int = 0
    max_reconnect_attempts: int = 100
    reconnect_interval: int = 5000
    last_weight: int = 0
    label_template: str = ""
    variables: dict[str, str] = field(default_factory=dict)
    current_printer: PrinterType = PrinterType.UNKNOWN
    current_status_cab: CabState = CabState.STOP
    current_status_makroline: LinxState = LinxState.SHUTDOWN