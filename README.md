# makroscales

`makroscales` connects three parties on a weighing and labelling line:

* **the line controller**. It speaks the Linx TTO command set (`SHD`, `GST`, `SST`, `SRC`, `CAF`, `SCB` and others). Its text is UTF-16LE and each command ends with a carriage return.
* **the PLC**. It sends the weight of each product as text on a separate TCP port, 9090 by default.
* **the CAB label printer**. It receives label field assignments (`R code;…`, `R name;…`, `R weight;…`) followed by `A1`.

When the line controller adds a code to the buffer, the code becomes a CAB label job. The job waits in a queue until the PLC sends a weight. The weight is then written into the oldest waiting job, and that job is passed to the printer client. The printer client writes each queued job to the printer. For every job it takes from its queue, it sends `PRC` back to the line controller.

## Installation

```
pip install makroscales
```

To run the test suite, install the `test` extra:

```
pip install "makroscales[test]"
pytest
```

## Running

```
makroscales [--config PATH] [--plc-port PORT]
```

The command does the following:

* builds an `AppController` and loads the connection settings;
* starts the line-controller listener and the PLC listener;
* connects to the printer;
* prints every log line to standard output until it is interrupted.

Settings are read from an INI file. The default location is `~/.config/Makro/MakroScales.ini`; `--config` sets another path. When a value is missing, these defaults apply:

| Endpoint | Address | Port |
|---|---|---|
| Listener for the line controller | 192.168.1.100 | 8080 |
| Printer | 192.168.1.200 | 9100 |

The PLC listener uses the same address as the line-controller listener, on `--plc-port` (default 9090). Each listener accepts one peer at a time and rejects any further connections.

## Library overview

| Module | Contents |
|---|---|
| `makroscales.core` | `Signal`, the enums (`LinxState`, `LinxCommand`, `CabCommand`, `CabState`, `CabStatus`, `PrinterType`, `CodeField`), `SharedState`, `linx_command_from_code`, `cab_command_bytes` |
| `makroscales.bridge` | `LinxCabBridge`: Linx command handling, Linx → CAB job building, weight insertion. Also `hex_string_to_bytes` and `is_valid_state_transition` |
| `makroscales.server` | `BridgeServer`: the asyncio listeners for the line controller and the PLC. Also `encode_response` and `hex_dump` |
| `makroscales.client` | `PrinterClient`: the asyncio connection to the printer and its send queue |
| `makroscales.counters` | `CountersBoard` and `format_counter`: buffer size, last weight, total count and printed count |
| `makroscales.logs` | `LogBook`, `LogChannel` and `classify_message`: time-stamped log lines, sorted into server, client and system channels |
| `makroscales.status` | `ConnectionStatus` and `indicator_style`: connection flags and start/stop requests |
| `makroscales.settings` | `ConnectionSettings`, `SettingsStore` and `validate_ip` |
| `makroscales.controller` | `AppController` and `main` |

Components talk to each other through `Signal` objects. `connect` attaches any callable, and `emit` calls every connected callable in the order it was connected.

### Examples

Replies to the line controller are UTF-16LE and end with a carriage return:

```python
from makroscales.server import encode_response

encode_response("ACK")  # b"A\x00C\x00K\x00\r\x00"
```

Space-separated hex text becomes raw bytes. Invalid tokens are skipped:

```python
from makroscales.bridge import hex_string_to_bytes

hex_string_to_bytes("1B 02 00 11")  # b"\x1b\x02\x00\x11"
```

## Linx commands handled

| Command | Reply / effect |
|---|---|
| `SHD`, `SDO` | Queue the code and build a CAB job that waits for a weight; reply `ACK` (`ERR\|INVALID_CODE` if no `code=` field) |
| `GST` | Reply `STS\|<state>\|0\|DemoJob\|<batch count>\|<total count>\|` |
| `SST` | Change the state if the transition is allowed and reply `ACK`; otherwise reply with an `ERS` message |
| `SRC` | Reply `SRC\|<queue size>` |
| `CAF` | Clear the code queue and the waiting jobs; reply `ACK` |
| `SCB` | Clear the code queue; reply `ACK` |
| `EAN` | Reply `ACK` |
| `JDA` | Reply `SFS\|951744\|` |
| `SLA` | Store the job variables; reply `ACK` |
| `PRN` | Logged only; printing starts when a weight arrives |
| anything else | Reply `ERR` |

## What the package does not do

* It has no graphical interface. Status, counters and logs are in-memory objects (`ConnectionStatus`, `CountersBoard`, `LogBook`). The `makroscales` command only prints the log lines.
* Only label jobs reach the printer. Start, stop, clear-buffer and status-request commands produced by `SST` and `CAF` are accepted by `PrinterClient` but are not sent.
* Nothing is read back from the printer. `PRC` means a job was taken from the send queue, not that the label was actually printed.