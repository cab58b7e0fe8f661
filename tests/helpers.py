# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""In-memory transport and frame builders shared by the unit tests."""

from typing import List, Optional

from mvusb_protocol.exceptions import TimeoutError
from mvusb_protocol.frames import FirmwareCommand, FrameHeader, SyncAck
from mvusb_protocol.transport import BulkTransport


def make_record(
    command: int,
    payload: bytes = b"",
    base_address: int = 0,
    crc: int = 0,
    data_length: Optional[int] = None,
) -> bytes:
    """Create one firmware image record (header + payload)."""
    if data_length is None:
        data_length = len(payload)
    header = FrameHeader(command, base_address, data_length, crc)
    return header.encode() + payload


def make_image(*payloads: bytes, command: int = 1) -> bytes:
    """Create an image whose last record carries the last-block sentinel."""
    records = [make_record(command, p, base_address=i * 0x100) for i, p in enumerate(payloads[:-1])]
    records.append(make_record(FirmwareCommand.LAST_BLOCK, payloads[-1]))
    return b"".join(records)


def make_ack(sequence_number: int, status: int = 0) -> bytes:
    """Create a sync ack as sent by the device."""
    return SyncAck(status, sequence_number).encode()


class FakeTransport(BulkTransport):
    """
    Scripted bulk transport.

    Each read pops the next entry of ``responses``: bytes are returned,
    exceptions are raised. Each write pops the next entry of
    ``write_results``: None succeeds, an exception is raised. Writes past
    the end of ``write_results`` succeed.
    """

    def __init__(self, responses: list = None, write_results: list = None):
        self.responses = list(responses or [])
        self.write_results = list(write_results or [])
        self.writes: List[tuple] = []
        self.reads: List[tuple] = []
        self.closed = False

    def write(self, endpoint: int, data: bytes, timeout_ms: int) -> int:
        self.writes.append((endpoint, bytes(data), timeout_ms))
        if self.write_results:
            outcome = self.write_results.pop(0)
            if outcome is not None:
                raise outcome
        return len(data)

    def read(self, endpoint: int, size: int, timeout_ms: int) -> bytes:
        self.reads.append((endpoint, size, timeout_ms))
        if not self.responses:
            raise TimeoutError("Nothing queued")
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp[:size]

    def close(self):
        self.closed = True

    @property
    def sent_data(self) -> List[bytes]:
        return [data for _, data, _ in self.writes]
