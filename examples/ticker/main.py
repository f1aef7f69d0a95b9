#!/usr/bin/env python3
"""
Ticker - Tessel Reactor Demo

A background reactor thread produces ticks into a ThreadedEventStream; the
main thread consumes them on its own asyncio loop, woken through the stream's
wake channel.

Run modes:
  python main.py                    # 5 ticks, 100ms apart
  python main.py --count 20 --interval 0.01
  python main.py --selector         # consume with a plain selector loop
"""

import argparse
import asyncio
import logging
import selectors
import sys
import threading

from tessel.core.message import Message
from tessel.core.reactor import Reactor
from tessel.streams.threaded import ThreadedEventStream

logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)

log = logging.getLogger("ticker")


class Tick(Message):
    index: int
    thread: str


async def produce(stream: ThreadedEventStream, count: int, interval: float) -> None:
    """Runs on the reactor thread."""
    for index in range(count):
        stream.emit(Tick(index=index, thread=threading.current_thread().name))
        await asyncio.sleep(interval)


async def consume(stream: ThreadedEventStream, count: int) -> list[Tick]:
    ticks = []
    async for tick in stream:
        log.info(f"tick {tick.index} from {tick.thread}")
        ticks.append(tick)
        if len(ticks) == count:
            stream.close()
    return ticks


def consume_with_selector(stream: ThreadedEventStream, count: int) -> list[Tick]:
    """Consume by watching the stream's readiness source directly."""
    ticks = []
    fd = stream.fileno()
    with selectors.DefaultSelector() as selector:
        selector.register(fd, selectors.EVENT_READ)
        while len(ticks) < count:
            result = stream.poll()
            if result.is_ready:
                ticks.append(result.message)
                log.info(f"tick {result.message.index} (selector)")
                continue
            if result.is_end:
                break
            selector.select()
            if stream.is_closed:
                break
            stream.channel.drain()
        selector.unregister(fd)
    stream.close()
    stream.channel.drain()
    return ticks


def main() -> None:
    parser = argparse.ArgumentParser(description="Tessel reactor demo")
    parser.add_argument("--count", type=int, default=5, help="Number of ticks")
    parser.add_argument("--interval", type=float, default=0.1, help="Seconds between ticks")
    parser.add_argument("--selector", action="store_true", help="Consume with a selector loop")
    args = parser.parse_args()

    with Reactor("ticker-reactor") as reactor:
        stream = reactor.stream("ticks")
        producer = reactor.spawn(produce(stream, args.count, args.interval))
        if args.selector:
            ticks = consume_with_selector(stream, args.count)
        else:
            ticks = asyncio.run(consume(stream, args.count))
        producer.result(timeout=5)

    print(f"received {len(ticks)} ticks, delivered log holds {len(stream.delivered)}")


if __name__ == "__main__":
    main()
