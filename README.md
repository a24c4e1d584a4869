# reactornet

A small reactor-style networking core for Linux, built on `select.epoll`
and `os.eventfd`. It provides:

- `reactornet.event_loop.EventLoop`: one loop per thread. It dispatches
  I/O events, runs queued work (`run_in_loop`, `queue_in_loop`) and timers
  (`run_at`, `run_after`, `run_every`, `cancel`). `quit` stops `loop`;
  `close` releases its descriptors and frees the thread for a new loop.
  Creating a second loop in the same thread raises `FatalError`.
- `reactornet.event_loop_thread.EventLoopThread`: starts a loop in a new
  thread; `start_loop` returns it once it exists, `close` quits and joins.
- `reactornet.event_loop_thread_pool.EventLoopThreadPool`: `num_threads`
  loop threads handed out round robin by `get_next_loop`. With no threads,
  `get_next_loop` and `get_all_loops` give the base loop.
- `reactornet.acceptor.Acceptor`: a non-blocking listening socket that
  passes each accepted connection (a non-blocking `socket.socket`) and its
  peer `InetAddress` to `new_connection_callback`. Without a callback the
  connection is closed at once.
- `reactornet.buffer.Buffer`: a growable byte buffer with an 8-byte
  prepend area, plus `read_fd` / `write_fd` for descriptor I/O.
- `reactornet.inet_address.InetAddress`, `reactornet.sockets.Socket`,
  `reactornet.channel.Channel`, `reactornet.poller.EPollPoller`,
  `reactornet.timer.Timer` / `TimerId`, `reactornet.timer_queue.TimerQueue`,
  `reactornet.timestamp.Timestamp`, `reactornet.thread.Thread` and
  `reactornet.current_thread.tid`.
- `reactornet.logger`: a shared `Logger` writing
  `[LEVEL]YYYY/MM/DD HH:MM:SS.uuuuuu : message` lines to standard output.
  `log_fatal` logs and then raises `FatalError`; `log_debug` writes only
  when `Logger.instance().debug_enabled` is true.

Setting the environment variable `REACTORNET_USE_POLL` makes
`new_default_poller` return `None`, and an `EventLoop` then cannot be
created.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example: accept connections

```python
from reactornet.acceptor import Acceptor
from reactornet.event_loop import EventLoop
from reactornet.inet_address import InetAddress


def new_connection(conn, peer_addr):
    print("accepted a connection from", peer_addr.to_ip_port())
    conn.send(b"How are you?\n")
    conn.close()


loop = EventLoop()
acceptor = Acceptor(loop, InetAddress(9981), True)
acceptor.new_connection_callback = new_connection
acceptor.listen()
loop.loop()
```

## Example: timers

```python
from reactornet.event_loop import EventLoop

loop = EventLoop()
loop.run_after(1.0, lambda: print("once after one second"))
every = loop.run_every(2.0, lambda: print("every two seconds"))
loop.run_after(7.0, lambda: loop.cancel(every))
loop.run_after(8.0, loop.quit)
loop.loop()
loop.close()
```

## Example: a pool of loops

```python
from reactornet.event_loop import EventLoop
from reactornet.event_loop_thread_pool import EventLoopThreadPool

base = EventLoop()
pool = EventLoopThreadPool(base, "worker")
pool.num_threads = 3
pool.start(lambda loop: print("started", loop))
io_loop = pool.get_next_loop()
io_loop.run_in_loop(lambda: print("running on a worker loop"))
pool.close()
base.close()
```

## Example: a buffer

```python
from reactornet.buffer import Buffer

buf = Buffer()
buf.append(b"hello world")
print(buf.retrieve_as_string(5))    # b'hello'
print(buf.retrieve_all_as_string()) # b' world'
```

## What it does not do

There is no TCP server or connection object here: nothing manages the
sockets that `Acceptor` hands over, spreads them over a pool's loops, or
reads and writes them through `Buffer` with message callbacks. The
callback receives the raw accepted socket and is responsible for it. There
is no command-line program either; the package is a library.