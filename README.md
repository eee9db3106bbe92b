# wsframes

A small, stream-based implementation of the WebSocket protocol (RFC 6455).
It covers frame encoding and decoding, masking, reassembly of fragmented
messages, and the connection state machine. That state machine answers pings
and drives the closing handshake.

It has no runtime dependencies.

## What it does not do

- It performs no opening HTTP handshake. Use it once the upgrade has already
  happened elsewhere.
- It does not open or accept connections, and it does not parse `ws://` or
  `wss://` URLs.
- It does not negotiate TLS. `wsframes.stream.MaybeTlsStream` only records
  whether the stream it wraps is plain or encrypted (`Mode.PLAIN` or
  `Mode.TLS`). The encryption itself must come from the wrapped object, for
  example an `ssl.SSLSocket`.
- It supports no extensions. Frames with reserved bits set are rejected.

## Streams

Anything with `read(size)` and `write(data)` can carry a connection. `flush()`
is called when it exists.

- `read` returns bytes. `b""` means end of stream, and `None` means "would
  block".
- `write` returns the number of bytes it took. `0` is treated as a connection
  reset, and `None` means "would block".

`io.BytesIO` qualifies, and so does `MaybeTlsStream`, which adapts a
`socket.socket` (`recv`/`send`) or a file-like object:

```python
import socket
from wsframes.stream import MaybeTlsStream, Mode

sock = socket.create_connection(("localhost", 8080))
# ... HTTP upgrade performed elsewhere ...
stream = MaybeTlsStream(sock, Mode.PLAIN)
stream.set_nodelay(True)
```

`wsframes.stream.set_nodelay(stream, nodelay)` switches `TCP_NODELAY` on a
socket, or on any object that has a `set_nodelay` method. For anything else it
raises `TypeError`.

## Reading and writing messages

```python
import io
from wsframes.websocket import WebSocket
from wsframes.context import Role, WebSocketConfig
from wsframes.message import Message

stream = io.BytesIO(b"\x81\x05Hello")
ws = WebSocket(stream, Role.CLIENT, WebSocketConfig())

reply = ws.read_message()
assert reply.is_text() and reply.to_text() == "Hello"

ws.write_message(Message.text("Hi"))
ws.write_message("also text")     # str becomes a text message
ws.write_message(b"\x00\x01")     # bytes become a binary message
```

Iterating over a `WebSocket` yields messages until `ConnectionClosed` is
raised:

```python
for message in ws:
    print(message)
```

Both `WebSocket.read_message` and `WebSocket.write_message` are thin wrappers
over `wsframes.context.WebSocketContext`. That class holds the same protocol
state, but you pass it the stream on every call.

### Messages

`wsframes.message.Message` is a frozen dataclass made of a `kind`
(`MessageKind.TEXT`, `BINARY`, `PING`, `PONG`, `CLOSE` or `FRAME`) and its
`data`. The constructors are `Message.text`, `binary`, `ping`, `pong`, `close`
and `raw`. A raw message sends a prepared `Frame` as it is.
`Message.from_value` turns a `str` or a bytes-like object into a message.

A message supports:

- `is_text()`, `is_binary()`, `is_ping()`, `is_pong()` and `is_close()`.
- `len()` and `is_empty()`.
- `into_data()` (also `bytes(message)`).
- `to_text()`, which raises `Utf8Error` on invalid UTF-8.

`str(message)` gives the text, or `Binary Data<length=N>` when the content
is not UTF-8.

### Behaviour

- **Masking.** A client masks every frame it sends. A server unmasks incoming
  frames and rejects unmasked ones unless `accept_unmasked_frames` is set.
- **Pings.** An incoming ping is still returned to you, and a pong reply is
  queued for it. The pong goes out on the next call to `read_message`,
  `write_message` or `write_pending`. Only the latest pong is kept.
- **Control frames.** A fragmented control frame, or one with a payload over
  125 bytes, raises `ProtocolError`.
- **Fragments.** Fragmented text and binary messages are reassembled before
  they are returned.

If the code that performed the handshake already read bytes of the first
frame, hand them over:

```python
ws = WebSocket.from_partially_read(stream, leftover_bytes, Role.SERVER, None)
```

## Closing

```python
from wsframes.frame import CloseFrame
from wsframes.coding import CloseCode

ws.close(CloseFrame(CloseCode(1000), "bye"))   # CloseCode.NORMAL is the same code
```

`close` queues the close frame once and tries to send it. After that:

- Keep calling `read_message` or `write_pending` until `ConnectionClosed` is
  raised.
- A server raises `ConnectionClosed` as soon as the close handshake is done
  and everything is flushed.
- A client raises it when the stream reaches end of file after the handshake.

When `ConnectionClosed` is raised, it is safe to drop the stream. Any further
call raises `AlreadyClosed`. Sending after a close raises `ProtocolError`.

If the peer sends a close code that may not be used on the wire, it is
replaced by `1002` ("Protocol violation"). `CloseCode.kind()` classifies a code
as a `CloseCodeKind`. `CloseCode.is_allowed()` tells whether the code may be
sent.

## Configuration

`wsframes.context.WebSocketConfig` fields:

| Field | Default | Meaning |
|---|---|---|
| `max_send_queue` | `None` (unlimited) | frames waiting to be sent |
| `max_message_size` | 64 MiB | size of a reassembled message |
| `max_frame_size` | 16 MiB | payload of a single frame |
| `accept_unmasked_frames` | `False` | let a server accept unmasked frames |

`WebSocket.config` may be changed in place. A message or frame over its limit
raises `MessageTooLong`. A full queue raises `SendQueueFull`, and its
`message` attribute holds the rejected message.

## Working with frames directly

```python
import io
from wsframes.framesocket import FrameSocket
from wsframes.frame import Frame

out = io.BytesIO()
FrameSocket(out, b"").write_frame(Frame.ping(b"\x01\x02"))
assert out.getvalue() == b"\x89\x02\x01\x02"

sock = FrameSocket(io.BytesIO(b"\x82\x03\x03\x02\x01\x99"), b"")
frame = sock.read_frame(None)       # max_size None: no limit
assert frame.payload == b"\x03\x02\x01"
assert sock.read_frame(None) is None  # stream exhausted
stream, rest = sock.into_inner()      # rest == b"\x99"
```

### Frame tools

- `Frame.message`, `ping`, `pong` and `close` build frames.
- `Frame.format()` encodes a frame.
- `FrameHeader.parse(data)` returns `(header, payload_length, header_size)`,
  or `None` if the header is incomplete.
- `wsframes.mask.apply_mask(buf, mask)` masks a buffer, and `generate_mask()`
  makes a random four-byte mask.
- `wsframes.coding.OpCode` lists the opcodes.

## Non-blocking streams

A stream may raise `BlockingIOError`, or return `None` from `read` or `write`.
Either way the call raises `BlockingIOError`. Data received so far and frames
queued so far are kept, so the call can simply be retried.

`wsframes.errors.no_block` runs a call and returns `None` instead of raising
when it would block:

```python
from wsframes.errors import no_block

message = no_block(ws.read_message)
```

`is_would_block(error)` tells whether an exception only means "would block".

## Errors

Every error derives from `wsframes.errors.WebSocketError`:

- `ConnectionClosed` and `AlreadyClosed`.
- `ProtocolError`. Its `violation` attribute is a `ProtocolViolation` member,
  and its `value` attribute holds an optional detail.
- `CapacityError` and its subclass `MessageTooLong`, with `size` and
  `max_size` attributes.
- `Utf8Error`.
- `SendQueueFull`.

A connection reset raised by the stream after a close has begun becomes
`ConnectionClosed`. Other `OSError`s pass through unchanged.