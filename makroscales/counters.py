"""Production counters shown to the operator."""

from __future__ import annotations

from .core import Signal

BUFFER_TITLE = "Кол-во кодов в буфере"
WEIGHT_TITLE = "Последний вес"
TOTAL_TITLE = "Общее количество"
PRINTED_TITLE = "Напеч. принтером"

PIECES = "шт"
GRAMS = "г"


def format_counter(value: int | float, unit: str = "") -> str:
    """Render a counter value; floats show one decimal unless whole."""
    if isinstance(value, float):
        text = str(int(value)) if value == int(value) else f"{value:.1f}"
    else:
        text = str(value)
    if unit:
        text += " " + unit
    return text


class CountersBoard:
    """Holds the four counters and publishes their rendered values on change."""

    def __init__(self) -> None:
        self.buffer_codes_count = 0
        self.last_weight = 0.0
        self.total_count = 0
        self.count_printed = 0
        self.updated = Signal()

    def set_buffer_codes_count(self, count: int) -> None:
        self.buffer_codes_count = count
        self._refresh()

    def set_last_weight(self, weight: float) -> None:
        self.last_weight = float(weight)
        self._refresh()

    def add_total_count(self, count: int) -> None:
        self.total_count += count
        self._refresh()

    def add_printed_count(self, count: int) -> None:
        self.count_printed += count
        self._refresh()

    def display(self) -> dict[str, str]:
        """Counter titles mapped to their rendered text."""
        return {
            BUFFER_TITLE: format_counter(self.buffer_codes_count, PIECES),
            WEIGHT_TITLE: format_counter(self.last_weight, GRAMS),
            TOTAL_TITLE: format_counter(self.total_count, PIECES),
            PRINTED_TITLE: format_counter(self.count_printed, PIECES),
        }

    def _refresh(self) -> None:
        self.updated.emit(self.display())