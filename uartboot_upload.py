#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Firmware upload tool for the UART bootloader.

Usage:
    python uartboot_upload.py version
    python uartboot_upload.py --port /dev/ttyUSB0 upload firmware.hex --run
    python uartboot_upload.py --port /dev/ttyUSB0 run

Requirements:
    pip install pyserial
"""

import argparse
import logging
import sys
from pathlib import Path

from uartboot_protocol import (
    BootloaderClient,
    BootloaderError,
    Completed,
    Failed,
    Progress,
    read_image,
)
from uartboot_protocol.protocol import DEFAULT_BAUDRATE, DEFAULT_RESPONSE_TIMEOUT


def cmd_version(client: BootloaderClient):
    """Print the bootloader version."""
    print(f"Bootloader version: {client.version()}")


def on_upload_event(event):
    if isinstance(event, Progress):
        print(
            f"\rUploading: {event.percent:4.0%} ({event.sent}/{event.total} bytes)",
            end="",
            flush=True,
        )
    elif isinstance(event, Completed):
        print("\rUploading: 100% - Complete!          ")
    elif isinstance(event, Failed):
        print(f"\nFAILED: {event.error}")


def cmd_upload(client: BootloaderClient, image_path: Path, run: bool) -> bool:
    """Upload a hex image, optionally starting it afterwards."""
    lines = read_image(image_path)
    print(f"Image: {image_path} ({len(lines)} lines)")

    client.add_observer(on_upload_event)
    try:
        client.upload(lines)
    except BootloaderError:
        return False
    finally:
        client.remove_observer(on_upload_event)

    if run:
        cmd_run(client)
    else:
        print()
        print("Firmware uploaded successfully!")
        print(f"Use: python {sys.argv[0]} --port {client.port} run")
    return True


def cmd_run(client: BootloaderClient):
    """Start the flashed program."""
    print("Starting program... ", end="", flush=True)
    client.run()
    print("OK")


def main():
    parser = argparse.ArgumentParser(
        description="Firmware upload tool for the UART bootloader"
    )
    parser.add_argument(
        "--port", "-p",
        default=None,
        help="Serial port (default: first USB serial port)"
    )
    parser.add_argument("--baud", "-b", type=int, default=DEFAULT_BAUDRATE,
                        help=f"Baud rate (default {DEFAULT_BAUDRATE})")
    parser.add_argument("--timeout", "-t", type=float, default=DEFAULT_RESPONSE_TIMEOUT,
                        help=f"Response timeout in seconds (default {DEFAULT_RESPONSE_TIMEOUT})")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log protocol traffic")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # version command
    subparsers.add_parser("version", help="Get bootloader version")

    # upload command
    upload_parser = subparsers.add_parser("upload", help="Upload a hex image")
    upload_parser.add_argument("file", type=Path, help="Firmware hex file")
    upload_parser.add_argument("--run", "-r", action="store_true",
                               help="Start the program after uploading")

    # run command
    subparsers.add_parser("run", help="Start the flashed program")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "upload" and not args.file.exists():
        print(f"Error: File not found: {args.file}")
        sys.exit(1)

    client = BootloaderClient(args.port, baudrate=args.baud, timeout=args.timeout)

    try:
        port = client.connect()
        print(f"Port '{port}' opened successfully!")
    except BootloaderError as e:
        print(f"Error opening {args.port or 'serial port'}: {e}")
        sys.exit(1)

    try:
        if args.command == "version":
            cmd_version(client)
        elif args.command == "upload":
            if not cmd_upload(client, args.file, args.run):
                sys.exit(1)
        elif args.command == "run":
            cmd_run(client)
    except BootloaderError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()
