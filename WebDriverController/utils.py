#!/usr/bin/env python3

"""
WebDriverController Utilities

This module contains utility functions for WebDriverController.
"""

import argparse
import asyncio
import json
import logging
import socket


def setup_logging(verbose: bool = False):
    """Setup logging for WebDriverController"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger("WebDriverController")
    return logger


def _interface(args):
    from .interface import WebDriverRemoteInterface

    return WebDriverRemoteInterface(
        browser=args.browser,
        executable=args.executable,
        port=args.port,
        endpoint=args.endpoint,
        headless=args.headless
    )


async def _fetch(args) -> str:
    async with _interface(args) as driver:
        return await driver.navigate_and_get_source(args.url)


async def _status(args) -> dict:
    async with _interface(args) as driver:
        status = await driver.status()
        return {"status": status, "capabilities": driver.capabilities}


def main():
    parser = argparse.ArgumentParser(description="WebDriverController - Drive a browser over WebDriver")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--browser", default="firefox", help="Browser variant (firefox, chrome, remote)")
    parser.add_argument("--executable", default=None, help="Driver executable path")
    parser.add_argument("--port", type=int, default=None, help="Driver port (automatic if omitted)")
    parser.add_argument("--endpoint", default=None, help="URL of an already running driver")
    parser.add_argument("--headless", action="store_true", help="Run the browser headless")

    subparsers = parser.add_subparsers(dest="command")

    fetch_parser = subparsers.add_parser("fetch", help="Load a URL and print its page source")
    fetch_parser.add_argument("url", help="URL to load")
    fetch_parser.add_argument("--outfile", help="Write the source to this file")

    subparsers.add_parser("status", help="Start a session and print driver status and capabilities")
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args()

    if args.command == "version":
        from . import __version__
        print("WebDriverController v{}".format(__version__))
        return

    elif args.command == "fetch":
        setup_logging(args.verbose)

        source = asyncio.run(_fetch(args))

        if args.outfile:
            with open(args.outfile, "w", encoding="utf-8") as f:
                f.write(source)
        else:
            print(source)

    elif args.command == "status":
        setup_logging(args.verbose)
        print(json.dumps(asyncio.run(_status(args)), indent=2, sort_keys=True))

    else:
        parser.print_help()


def find_available_port(start_port: int = 4444, max_attempts: int = 100, host: str = "127.0.0.1") -> int:
    """
    Pick a free TCP port for a local driver.

    The OS is asked for an ephemeral port first; if that fails or hands out
    a privileged port, ports from `start_port` upwards are probed by binding
    to them. The port is free when checked, the driver binds it later.

    Args:
        start_port: First port of the fallback scan
        max_attempts: Number of ports the fallback scan tries
        host: Interface the driver will listen on

    Returns:
        Port number

    Raises:
        OSError: If every probed port is taken
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, 0))
            port = sock.getsockname()[1]
        if port >= 1024:
            return port
    except OSError:
        logging.getLogger("WebDriverController.Utils").debug("Ephemeral port lookup failed, scanning from {}".format(
            start_port))

    for candidate in range(start_port, start_port + max_attempts):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.bind((host, candidate))
            return candidate
        except OSError:
            continue

    raise OSError("No free port in {}-{} on {}".format(start_port, start_port + max_attempts - 1, host))


if __name__ == "__main__":
    main()
