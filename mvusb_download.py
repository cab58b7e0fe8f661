#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Firmware download tool for Marvell USB wireless chips in boot mode.

Usage:
    python mvusb_download.py usb8797_uapsta.bin
    python mvusb_download.py usb8797_uapsta.bin --retries 5 --verbose

Requirements:
    pip install pyusb
"""

import argparse
import logging
import sys
from pathlib import Path

import usb.core

from mvusb_protocol import (
    DownloadConfig,
    FirmwareImage,
    MvusbError,
    UsbTransport,
    download_firmware,
    find_device,
)


def cmd_download(firmware_path: Path, config: DownloadConfig) -> bool:
    """Find the device and download firmware to it."""
    image = FirmwareImage.from_file(firmware_path, config.no_data_command)
    print(f"Firmware: {firmware_path} ({image.size} bytes)")

    device, chip = find_device()
    print(f"Device:   {chip} (Bus {device.bus:03d} Device {device.address:03d} "
          f"ID {device.idVendor:04x}:{device.idProduct:04x})")
    print()

    def progress(sent: int, total: int):
        pct = sent * 100 // total
        print(f"\rDownloading: {pct:3d}% ({sent}/{total} bytes)", end="", flush=True)

    with UsbTransport(device, interface=config.interface) as transport:
        try:
            result = download_firmware(transport, image, config, progress_callback=progress)
        finally:
            print()

    rev = result.chip_revision
    source = "from response" if rev.from_response else "default"
    print(f"Chip rev: 0x{rev.revision:08x} ({source})")
    print(f"Firmware downloaded successfully! ({result.blocks_sent} blocks)")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Firmware download tool for Marvell USB wireless chips"
    )
    parser.add_argument("firmware", type=Path, help="Firmware image file")
    parser.add_argument("--timeout", "-t", type=int, default=None,
                        help="Bulk transfer timeout in ms (default 100)")
    parser.add_argument("--retries", "-r", type=int, default=None,
                        help="Transfer attempts per block (default 3)")
    parser.add_argument("--interface", "-i", type=int, default=None,
                        help="USB interface number (default 0)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log every frame")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = DownloadConfig().with_overrides(
            timeout_ms=args.timeout,
            max_retries=args.retries,
            interface=args.interface,
        )
    except ValueError as e:
        parser.error(str(e))

    if not args.firmware.exists():
        print(f"Error: File not found: {args.firmware}")
        sys.exit(1)

    try:
        cmd_download(args.firmware, config)
    except (MvusbError, usb.core.NoBackendError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
