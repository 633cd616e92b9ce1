"""
Async Sensor Event Receiver Application

Reads framed sensor messages from a serial board and turns trigger records
into jump events:
- Configuration management
- Protocol handling (frame decoding, payload interpretation)
- Event processing (trigger rule, sink dispatch)
- Storage (bounded in-memory trace)
- Utilities (logging, trace formatting)
"""

import argparse
import asyncio
from typing import Dict, Iterable, Optional

import serial
import serial_asyncio

from .config import config
from .processors import EventRouter, TriggerDispatcher, log_trigger
from .protocol.serial_handler import SerialProtocol, new_stats
from .storage import BoundedLog
from .utils import setup_logging, TraceFormatter

# Setup logging
logger = setup_logging()


async def check_timeouts(session: Dict) -> None:
    """Periodically reset a decoder that is parked mid-frame."""
    while True:
        try:
            await asyncio.sleep(config.WATCHDOG_INTERVAL)
            protocol = session.get("protocol")
            if protocol is None:
                continue

            if protocol.check_stall():
                log_stats(protocol)

        except asyncio.CancelledError:
            logger.info("Timeout checker task cancelled.")
            break
        except Exception as e:
            logger.exception(f"Error in timeout checker: {e}")


def log_stats(protocol: SerialProtocol) -> None:
    """統計情報と最新のセンサー値をログ出力"""
    stats = protocol.stats
    latest = protocol.latest_record
    latest_str = TraceFormatter.format_record(latest) if latest is not None else "-"
    logger.info(
        f"Stats: {stats['bytes_received']} bytes, {stats['frames_decoded']} frames, "
        f"{stats['records_decoded']} records, {stats['triggers']} triggers, "
        f"{stats['resets']} resets, latest: {latest_str}"
    )


def log_recent_trace(bounded_log: BoundedLog, limit: int = 10) -> None:
    """直近のトレースをデバッグ出力（チャネルごとに limit 件）"""
    lines = TraceFormatter.format_snapshot(bounded_log.snapshot(), limit)
    for line in lines:
        logger.debug(f"  {line}")


async def main(port: str, baud: int, trigger_id: Optional[int] = None,
               log_capacity: Optional[int] = None,
               sinks: Optional[Iterable] = None,
               test_trigger: bool = False) -> Dict[str, int]:
    """Main asynchronous function."""
    logger.info("Starting Async Serial Sensor Event Receiver")

    router = EventRouter(trigger_id)
    dispatcher = TriggerDispatcher(router.trigger_id)
    for sink in (sinks if sinks is not None else [log_trigger]):
        dispatcher.subscribe(sink)
    bounded_log = BoundedLog(log_capacity)
    stats = new_stats()
    logger.info(f"Trigger id: {router.trigger_id}, trace capacity: {bounded_log.capacity}")

    if test_trigger:
        # デバイスなしでシンクの動作確認
        dispatcher.trigger_manually()

    loop = asyncio.get_running_loop()
    session = {"protocol": None}
    timeout_task = loop.create_task(check_timeouts(session))

    while True:  # Reconnection loop
        transport = None
        connection_lost_future = loop.create_future()

        try:
            logger.info(f"Attempting to connect to {port} at {baud} baud...")

            def protocol_factory():
                protocol = SerialProtocol(
                    connection_lost_future,
                    router,
                    dispatcher,
                    bounded_log,
                    stats
                )
                session["protocol"] = protocol
                return protocol

            transport, protocol = await serial_asyncio.create_serial_connection(
                loop, protocol_factory, port, baudrate=baud
            )
            logger.info("Connection established.")

            logger.info("Monitoring connection (awaiting future)...")
            await connection_lost_future
            logger.info("Connection lost signaled (future completed).")

        except serial.SerialException as e:
            logger.error(f"Serial connection error: {e}")
            if not connection_lost_future.done():
                connection_lost_future.set_exception(e)

        except asyncio.CancelledError:
            logger.info("Main task cancelled during connection/monitoring.")
            if connection_lost_future and not connection_lost_future.done():
                connection_lost_future.cancel("Main task cancelled")
            break

        except Exception as e:
            logger.exception(f"Error during connection or monitoring: {e}")
            if connection_lost_future and not connection_lost_future.done():
                try:
                    connection_lost_future.set_exception(e)
                except asyncio.InvalidStateError:
                    pass

        finally:
            if session["protocol"] is not None:
                log_stats(session["protocol"])
            session["protocol"] = None
            if transport and not transport.is_closing():
                logger.info("Closing transport in finally block.")
                transport.close()
            transport = None
            if config.DEBUG_FRAME_PARSING:
                log_recent_trace(bounded_log)

        logger.info(f"Waiting {config.RECONNECT_DELAY} seconds before retrying connection...")
        try:
            if connection_lost_future.done() and not connection_lost_future.cancelled() \
                    and connection_lost_future.exception():
                logger.info(f"Previous connection ended with error: {connection_lost_future.exception()}")
            await asyncio.sleep(config.RECONNECT_DELAY)
        except asyncio.CancelledError:
            logger.info("Retry delay cancelled. Exiting reconnection loop.")
            break

    # Cleanup
    logger.info("Shutting down timeout task...")
    timeout_task.cancel()
    try:
        await timeout_task
    except asyncio.CancelledError:
        pass

    logger.info(
        f"Application finished. {stats['frames_decoded']} frames, "
        f"{stats['records_decoded']} records, {stats['triggers']} triggers."
    )
    return stats


def run() -> None:
    """Command line entry point."""
    parser = argparse.ArgumentParser(description="Async receive sensor events via serial.")
    parser.add_argument(
        "-p", "--port", default=config.SERIAL_PORT,
        help=f"Serial port (default: {config.SERIAL_PORT})"
    )
    parser.add_argument(
        "-b", "--baud", type=int, default=config.BAUD_RATE,
        help=f"Baud rate (default: {config.BAUD_RATE})"
    )
    parser.add_argument(
        "--trigger-id", type=int, default=config.TRIGGER_ID,
        help=f"Record id that triggers a jump (default: {config.TRIGGER_ID})"
    )
    parser.add_argument(
        "--log-capacity", type=int, default=config.LOG_CAPACITY,
        help=f"Entries kept per trace channel (default: {config.LOG_CAPACITY})"
    )
    parser.add_argument(
        "--test-trigger", action="store_true",
        help="Dispatch one manual trigger at startup to check the sinks"
    )
    args = parser.parse_args()

    try:
        asyncio.run(main(args.port, args.baud, args.trigger_id, args.log_capacity,
                         test_trigger=args.test_trigger))
    except KeyboardInterrupt:
        logger.info("Exiting due to KeyboardInterrupt.")


if __name__ == "__main__":
    run()
