# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Exceptions raised while talking to a Marvell USB boot ROM.

Only TransportError is recovered locally (by the download retry loop);
every other exception aborts the download.
"""


class MvusbError(Exception):
    """Base exception for all firmware download errors."""
    pass


class TransportError(MvusbError):
    """Bulk transfer failed."""
    pass


class TimeoutError(TransportError):
    """Bulk transfer timed out."""
    pass


class ProtocolError(MvusbError):
    """Protocol-level error (malformed frame, unexpected response, etc.)."""
    pass


class TruncatedFrame(ProtocolError):
    """Fewer bytes available than the fixed width of a wire structure."""

    def __init__(self, name: str, expected: int, got: int):
        super().__init__(f"Truncated {name}: need {expected} bytes, got {got}")
        self.expected = expected
        self.got = got


class TruncatedImage(MvusbError):
    """Firmware image is shorter than its own block headers declare."""
    pass


class DownloadError(MvusbError):
    """Fatal error during the block transfer."""
    pass


class DeviceCrcError(DownloadError):
    """Device reported a CRC error for the block just sent."""

    def __init__(self, sequence_number: int, status: int):
        super().__init__(
            f"FW received block {sequence_number} with CRC error (status 0x{status:08x})"
        )
        self.sequence_number = sequence_number
        self.status = status


class SequenceMismatch(DownloadError):
    """Ack sequence number does not match the block that was sent."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"Mismatch in seq, got {received}, expected: {expected}")
        self.expected = expected
        self.received = received


class ExhaustedRetries(DownloadError):
    """Transport retry budget ran out on a single block."""

    def __init__(self, sequence_number: int, attempts: int):
        super().__init__(
            f"FW download did not succeed: block {sequence_number} "
            f"failed {attempts} transfer attempts"
        )
        self.sequence_number = sequence_number
        self.attempts = attempts


class UnsupportedDevice(MvusbError):
    """Marvell device with a product id we do not know how to handle."""

    def __init__(self, product_id: int):
        super().__init__(f"Unhandled marvell device with pid: 0x{product_id:04X}")
        self.product_id = product_id


class DeviceNotFound(MvusbError):
    """No matching USB device is attached."""
    pass
