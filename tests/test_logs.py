from datetime import datetime

import pytest

from makroscales.logs import LogBook, LogChannel, classify_message


def fixed_clock():
    return datetime(2024, 1, 1, 12, 34, 56)


@pytest.mark.parametrize(
    "message, channel",
    [
        ("[Server] started", LogChannel.SERVER),
        ("[SERVER] upper", LogChannel.SERVER),
        ("[Client] connected", LogChannel.CLIENT),
        ("[client] lower", LogChannel.CLIENT),
        ("[System] other", LogChannel.SYSTEM),
        ("[MakrolineWorker] reply", LogChannel.SYSTEM),
    ],
)
def test_classify(message, channel):
    assert classify_message(message) is channel


def test_server_tag_wins_over_client_tag():
    assert classify_message("[Client] then [Server]") is LogChannel.SERVER


def test_add_message_formats_timestamp():
    book = LogBook(clock=fixed_clock)
    line = book.add_log_message("[Server] hi")
    assert line == "[12:34:56] [Server] hi"
    assert book.entries(LogChannel.SERVER) == [line]
    assert book.entries(LogChannel.CLIENT) == []


def test_messages_routed_and_ordered():
    book = LogBook(clock=fixed_clock)
    book.add_log_message("[Client] a")
    book.add_log_message("plain")
    book.add_log_message("[Client] b")
    client = book.entries(LogChannel.CLIENT)
    assert [entry.endswith(suffix) for entry, suffix in zip(client, ["a", "b"])] == [True, True]
    assert len(book.entries(LogChannel.SYSTEM)) == 1


def test_entries_returns_copy():
    book = LogBook(clock=fixed_clock)
    book.add_log_message("x")
    book.entries(LogChannel.SYSTEM).clear()
    assert len(book.entries(LogChannel.SYSTEM)) == 1


def test_message_added_signal():
    book = LogBook(clock=fixed_clock)
    seen = []
    book.message_added.connect(lambda channel, line: seen.append((channel, line)))
    line = book.add_log_message("[Client] z")
    assert seen == [(LogChannel.CLIENT, line)]