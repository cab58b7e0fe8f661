# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Marvell USB firmware download frame definitions and serialization.

All wire structures are fixed-width sequences of little-endian u32 fields.
A data block's payload is appended raw after the encoded header and
sequence number.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum

from .exceptions import TruncatedFrame

# Transmit buffer size for chip revision check
CHIP_REV_TX_BUF_SIZE = 16
# Receive buffer size for chip revision check and firmware download
FW_DNLD_RX_BUF_SIZE = 2048

EXTEND_HDR = 0xAB95
EXTEND_V1 = 0x0001
EXTEND_MAGIC = (EXTEND_HDR << 16) | EXTEND_V1

# USB8797 chip revision ids
USB8797_A0 = 0x00000000
USB8797_B0 = 0x03800010


class FirmwareCommand(IntEnum):
    """Download command values with special meaning to the host."""
    LAST_BLOCK = 0x00000004
    CMD7 = 0x00000007

    def __str__(self) -> str:
        return self.name


_HEADER = struct.Struct("<4I")
_SEQ = struct.Struct("<I")
_SYNC = struct.Struct("<2I")
_ACK_PKT = struct.Struct("<4I")


def _check_length(name: str, data: bytes, size: int) -> None:
    if len(data) < size:
        raise TruncatedFrame(name, size, len(data))


@dataclass
class FrameHeader:
    """Per-block header as stored in the firmware image."""
    download_command: int
    base_address: int
    data_length: int
    crc: int

    SIZE = _HEADER.size

    def encode(self) -> bytes:
        return _HEADER.pack(
            self.download_command, self.base_address, self.data_length, self.crc
        )

    @classmethod
    def decode(cls, data: bytes) -> "FrameHeader":
        """
        Decode a header from the start of data.

        Raises:
            TruncatedFrame: If fewer than 16 bytes are available
        """
        _check_length("FrameHeader", data, cls.SIZE)
        return cls(*_HEADER.unpack_from(data))


@dataclass
class DataBlock:
    """A header plus engine-assigned sequence number and payload."""
    header: FrameHeader
    sequence_number: int
    payload: bytes = b""

    HEADER_SIZE = FrameHeader.SIZE + _SEQ.size

    def encode(self) -> bytes:
        return self.header.encode() + _SEQ.pack(self.sequence_number) + self.payload

    @classmethod
    def decode(cls, data: bytes) -> "DataBlock":
        """
        Decode a data block; everything after the sequence number is payload.

        Raises:
            TruncatedFrame: If the header and sequence number are incomplete
        """
        _check_length("DataBlock", data, cls.HEADER_SIZE)
        header = FrameHeader.decode(data)
        (seq,) = _SEQ.unpack_from(data, FrameHeader.SIZE)
        return cls(header=header, sequence_number=seq, payload=bytes(data[cls.HEADER_SIZE:]))

    def __len__(self) -> int:
        return self.HEADER_SIZE + len(self.payload)


@dataclass
class SyncAck:
    """Device response to a data block."""
    status_command: int
    sequence_number: int

    SIZE = _SYNC.size

    @property
    def is_crc_error(self) -> bool:
        return self.status_command > 0

    def encode(self) -> bytes:
        return _SYNC.pack(self.status_command, self.sequence_number)

    @classmethod
    def decode(cls, data: bytes) -> "SyncAck":
        """
        Decode a sync ack. Trailing bytes are ignored.

        Raises:
            TruncatedFrame: If fewer than 8 bytes are available
        """
        _check_length("SyncAck", data, cls.SIZE)
        return cls(*_SYNC.unpack_from(data))


@dataclass
class ChipRevResponse:
    """Extended ack packet returned by the chip revision probe."""
    ack_marker: int
    sequence: int
    extend_magic: int
    chip_revision: int

    SIZE = _ACK_PKT.size

    @property
    def is_extended(self) -> bool:
        """True if the response carries a trustworthy chip revision."""
        return self.extend_magic == EXTEND_MAGIC

    def encode(self) -> bytes:
        return _ACK_PKT.pack(
            self.ack_marker, self.sequence, self.extend_magic, self.chip_revision
        )

    @classmethod
    def decode(cls, data: bytes) -> "ChipRevResponse":
        """
        Decode a chip revision response. Trailing bytes are ignored.

        Raises:
            TruncatedFrame: If fewer than 16 bytes are available
        """
        _check_length("ChipRevResponse", data, cls.SIZE)
        return cls(*_ACK_PKT.unpack_from(data))


def encode_chip_rev_query(size: int = CHIP_REV_TX_BUF_SIZE) -> bytes:
    """Encode the zero-filled chip revision probe."""
    return bytes(size)


def encode_data_block(header: FrameHeader, sequence_number: int, payload: bytes = b"") -> bytes:
    """Encode a data block ready for a single bulk-out transfer."""
    return DataBlock(header, sequence_number, payload).encode()
