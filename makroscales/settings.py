"""Persistent connection settings for the line server and the printer."""

from __future__ import annotations

import configparser
import re
from dataclasses import dataclass
from pathlib import Path

from .core import Signal

DEFAULT_SERVER_IP = "192.168.1.100"
DEFAULT_SERVER_PORT = 8080
DEFAULT_CLIENT_IP = "192.168.1.200"
DEFAULT_CLIENT_PORT = 9100

MIN_PORT = 1
MAX_PORT = 65535

SERVER_IP_ERROR = "Пожалуйста, введите корректный IP адрес сервера"
CLIENT_IP_ERROR = "Пожалуйста, введите корректный IP адрес принтера"

_IP_SHAPE = re.compile(r"\d{1,3}(\.\d{1,3}){3}")


def validate_ip(text: str) -> str:
    """Return the address if it is a complete dotted address; raise ValueError otherwise."""
    if not text or "_" in text or not _IP_SHAPE.fullmatch(text):
        raise ValueError(f"incomplete IP address: {text!r}")
    return text


def _clamp_port(port: int) -> int:
    return min(max(port, MIN_PORT), MAX_PORT)


@dataclass(frozen=True)
class ConnectionSettings:
    server_ip: str = DEFAULT_SERVER_IP
    server_port: int = DEFAULT_SERVER_PORT
    client_ip: str = DEFAULT_CLIENT_IP
    client_port: int = DEFAULT_CLIENT_PORT


def _default_path() -> Path:
    return Path.home() / ".config" / "Makro" / "MakroScales.ini"


class SettingsStore:
    """Reads and writes connection settings in an INI file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else _default_path()
        self.settings_saved = Signal()

    def _read(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser()
        parser.read(self.path, encoding="utf-8")
        return parser

    def load(self) -> ConnectionSettings:
        """Load the settings, falling back to defaults for missing or unreadable values."""
        parser = self._read()

        def port(section: str, default: int) -> int:
            try:
                value = parser.getint(section, "port", fallback=default)
            except ValueError:
                value = default
            return _clamp_port(value)

        return ConnectionSettings(
            server_ip=parser.get("server", "ip", fallback=DEFAULT_SERVER_IP),
            server_port=port("server", DEFAULT_SERVER_PORT),
            client_ip=parser.get("client", "ip", fallback=DEFAULT_CLIENT_IP),
            client_port=port("client", DEFAULT_CLIENT_PORT),
        )

    def save(self, settings: ConnectionSettings) -> None:
        """Validate and store the settings, then emit ``settings_saved``."""
        try:
            validate_ip(settings.server_ip)
        except ValueError:
            raise ValueError(SERVER_IP_ERROR) from None
        try:
            validate_ip(settings.client_ip)
        except ValueError:
            raise ValueError(CLIENT_IP_ERROR) from None
        for port in (settings.server_port, settings.client_port):
            if not MIN_PORT <= port <= MAX_PORT:
                raise ValueError(f"port out of range: {port}")

        parser = self._read()
        for section, ip, port in (
            ("server", settings.server_ip, settings.server_port),
            ("client", settings.client_ip, settings.client_port),
        ):
            if not parser.has_section(section):
                parser.add_section(section)
            parser.set(section, "ip", ip)
            parser.set(section, "port", str(port))

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            parser.write(handle)

        self.settings_saved.emit(settings)