# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Marvell USB firmware download - Python client library.

This package downloads firmware to Marvell 88W8782U / 88W8897 wireless
chips sitting in USB boot mode, using the vendor block transfer protocol
over bulk endpoints.

Example usage:
    from mvusb_protocol import FirmwareImage, UsbTransport, download_firmware, find_device

    device, chip = find_device()
    with UsbTransport(device) as transport:
        result = download_firmware(
            transport,
            FirmwareImage.from_file("usb8797_uapsta.bin"),
            progress_callback=lambda sent, total: print(f"{sent}/{total}"),
        )
    print(f"Sent {result.blocks_sent} blocks")
"""

from .chips import MARVELL_VENDOR_ID, MarvellChip, chip_for_product_id, find_device
from .config import DownloadConfig
from .download import (
    BlockTransferEngine,
    ChipRevision,
    DownloadResult,
    TransferState,
    download_firmware,
    probe_chip_revision,
)
from .exceptions import (
    MvusbError,
    TransportError,
    TimeoutError,
    ProtocolError,
    TruncatedFrame,
    TruncatedImage,
    DownloadError,
    DeviceCrcError,
    SequenceMismatch,
    ExhaustedRetries,
    UnsupportedDevice,
    DeviceNotFound,
)
from .frames import (
    EXTEND_MAGIC,
    USB8797_A0,
    USB8797_B0,
    FirmwareCommand,
    FrameHeader,
    DataBlock,
    SyncAck,
    ChipRevResponse,
    encode_chip_rev_query,
    encode_data_block,
)
from .image import FirmwareImage
from .transport import BulkTransport, UsbTransport

__version__ = "0.1.0"

__all__ = [
    # Frames
    "EXTEND_MAGIC",
    "USB8797_A0",
    "USB8797_B0",
    "FirmwareCommand",
    "FrameHeader",
    "DataBlock",
    "SyncAck",
    "ChipRevResponse",
    "encode_chip_rev_query",
    "encode_data_block",
    # Image
    "FirmwareImage",
    # Config
    "DownloadConfig",
    # Download
    "BlockTransferEngine",
    "ChipRevision",
    "DownloadResult",
    "TransferState",
    "download_firmware",
    "probe_chip_revision",
    # Transport
    "BulkTransport",
    "UsbTransport",
    # Chips
    "MARVELL_VENDOR_ID",
    "MarvellChip",
    "chip_for_product_id",
    "find_device",
    # Exceptions
    "MvusbError",
    "TransportError",
    "TimeoutError",
    "ProtocolError",
    "TruncatedFrame",
    "TruncatedImage",
    "DownloadError",
    "DeviceCrcError",
    "SequenceMismatch",
    "ExhaustedRetries",
    "UnsupportedDevice",
    "DeviceNotFound",
]
