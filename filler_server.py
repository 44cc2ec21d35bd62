#!/usr/bin/env python3
"""
ceac-filler
Coordinates the control panel and the CEAC visa form window over stdio JSON-RPC
"""
import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from formfill.config import ConfigurationManager
from formfill.coordinator import Coordinator
from formfill.jsonrpc_handler import JSONRPCHandler

# Configure logging; stdout is reserved for JSON-RPC responses
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def setup_components(config_path: Path) -> Tuple[ConfigurationManager, Coordinator, JSONRPCHandler]:
    """Initialize and setup all components.

    Returns:
        Tuple of (config_manager, coordinator, jsonrpc_handler)
    """
    config_manager = ConfigurationManager(config_path).load()
    coordinator = Coordinator.from_config(config_manager)
    jsonrpc_handler = JSONRPCHandler(coordinator)

    return config_manager, coordinator, jsonrpc_handler


async def process_request(line: str, jsonrpc_handler: JSONRPCHandler) -> Optional[Dict[str, Any]]:
    """Process a single request line.

    Returns:
        The response to write, or None for notifications and ignored input
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        # For parse errors, check if it looks like a JSON-RPC request
        if line.startswith('{') and any(key in line for key in ('jsonrpc', 'method')):
            return {
                "jsonrpc": "2.0",
                "id": None,
                "error": {
                    "code": -32700,
                    "message": "Parse error"
                }
            }
        logger.warning(f"Ignoring non-JSON input: {line[:50]}...")
        return None

    if not isinstance(data, dict):
        return {
            "jsonrpc": "2.0",
            "id": None,
            "error": {
                "code": -32600,
                "message": "Invalid Request"
            }
        }

    response = await jsonrpc_handler.handle_request(data)

    # Only return response if the original request had an id (not a notification)
    if "id" in data and response is not None:
        return response
    return None


async def run_cleanup(coordinator: Coordinator, interval: float, shutdown_event: asyncio.Event) -> None:
    """Sweep expired sessions every interval seconds until shutdown"""
    while not shutdown_event.is_set():
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            coordinator.cleanup()


async def main() -> None:
    """Main entry point for stdio mode"""
    logger.info("ceac-filler starting in stdio mode")

    parser = argparse.ArgumentParser(description="ceac-filler")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Configuration file path (default: config.json)"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    args = parser.parse_args()

    logging.getLogger().setLevel(getattr(logging, args.log_level))

    config_manager, coordinator, jsonrpc_handler = setup_components(args.config)
    coordinator.attach_control_panel()

    shutdown_event = asyncio.Event()

    def signal_handler(signum: int, _) -> None:
        logger.info(f"Received signal {signum}, initiating shutdown...")
        shutdown_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        loop = asyncio.get_event_loop()

        stdin_reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(stdin_reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)

        async def read_stdin() -> None:
            while not shutdown_event.is_set():
                try:
                    # Use asyncio timeout to make stdin reading cancellable
                    line_bytes = await asyncio.wait_for(
                        stdin_reader.readline(),
                        timeout=1.0
                    )

                    # Empty bytes from readline means the control panel went away
                    if not line_bytes:
                        logger.info("Stdin closed - control panel disconnected, initiating shutdown")
                        shutdown_event.set()
                        break

                    line = line_bytes.decode().strip()
                    if not line:
                        continue

                    if response := await process_request(line, jsonrpc_handler):
                        print(json.dumps(response))
                        sys.stdout.flush()

                except asyncio.TimeoutError:
                    continue
                except Exception as e:
                    if shutdown_event.is_set():
                        break
                    logger.error(f"Error reading stdin: {e}")
                    break

        stdin_task = asyncio.create_task(read_stdin())
        cleanup_task = asyncio.create_task(
            run_cleanup(coordinator, config_manager.security.cleanup_interval, shutdown_event)
        )
        shutdown_task = asyncio.create_task(shutdown_event.wait())

        _, pending = await asyncio.wait(
            [stdin_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED
        )

        logger.info("Main loop exiting, cancelling remaining tasks...")
        shutdown_event.set()

        for task in [*pending, cleanup_task]:
            logger.debug(f"Cancelling task: {task}")
            task.cancel()
            try:
                await asyncio.wait_for(task, timeout=2.0)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                pass

    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
    finally:
        try:
            await asyncio.wait_for(coordinator.shutdown(), timeout=30.0)
            logger.info("Browser cleanup completed successfully")
        except asyncio.TimeoutError:
            logger.error("Browser cleanup timed out after 30 seconds")
        except Exception as e:
            logger.error(f"Error during browser cleanup: {e}")

        logger.info("ceac-filler shutdown complete")


def cli() -> None:
    """Console script entry point"""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
