# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Sequential reader over a Marvell firmware image.

An image is a concatenation of records, each a 16-byte FrameHeader followed
by data_length bytes of payload (none for CMD7 records).
"""

from pathlib import Path
from typing import Iterator, Optional, Tuple

from .exceptions import TruncatedFrame, TruncatedImage
from .frames import FirmwareCommand, FrameHeader

Record = Tuple[FrameHeader, bytes]


class FirmwareImage:
    """
    Forward-only cursor over a firmware image.

    Can be iterated:
        for header, payload in FirmwareImage(data):
            ...
    """

    def __init__(self, data: bytes, no_data_command: int = FirmwareCommand.CMD7):
        self._data = bytes(data)
        self._offset = 0
        self._no_data_command = no_data_command

    @classmethod
    def from_file(cls, path, no_data_command: int = FirmwareCommand.CMD7) -> "FirmwareImage":
        """
        Load an image from disk.

        Raises:
            FileNotFoundError: If the firmware file does not exist
            OSError: If the path cannot be read, e.g. a directory
        """
        return cls(Path(path).read_bytes(), no_data_command)

    @property
    def size(self) -> int:
        return len(self._data)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    @property
    def exhausted(self) -> bool:
        return self._offset >= len(self._data)

    def payload_length(self, header: FrameHeader) -> int:
        """Effective payload length; the no-data command ignores data_length."""
        if header.download_command == self._no_data_command:
            return 0
        return header.data_length

    def next_record(self) -> Optional[Record]:
        """
        Read the record at the cursor and advance past it.

        Returns:
            (header, payload) tuple, or None if the image is exhausted

        Raises:
            TruncatedImage: If the header or payload runs past the end
        """
        if self.exhausted:
            return None

        try:
            header = FrameHeader.decode(self._data[self._offset:])
        except TruncatedFrame as e:
            raise TruncatedImage(f"Truncated header at offset {self._offset}: {e}") from e

        start = self._offset + FrameHeader.SIZE
        end = start + self.payload_length(header)
        if end > len(self._data):
            raise TruncatedImage(
                f"Truncated payload at offset {start}: need {end - start} bytes, "
                f"got {len(self._data) - start}"
            )

        self._offset = end
        return header, self._data[start:end]

    def __iter__(self) -> Iterator[Record]:
        while True:
            record = self.next_record()
            if record is None:
                return
            yield record
