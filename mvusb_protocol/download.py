# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Chip revision probe and block transfer engine.

The engine sends one firmware record per block and waits for the device's
sync ack before moving on. Transport failures are retried a bounded number
of times per block; CRC errors and sequence mismatches reported by the
device abort the download immediately.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from .config import DownloadConfig
from .exceptions import (
    DeviceCrcError,
    ExhaustedRetries,
    SequenceMismatch,
    TransportError,
    TruncatedImage,
)
from .frames import (
    USB8797_A0,
    ChipRevResponse,
    DataBlock,
    SyncAck,
    encode_chip_rev_query,
)
from .image import FirmwareImage
from .transport import BulkTransport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class ChipRevision:
    """Outcome of the chip revision probe."""
    revision: int
    from_response: bool
    response: Optional[ChipRevResponse] = None


@dataclass
class DownloadResult:
    """Summary of a completed download."""
    blocks_sent: int
    bytes_sent: int
    last_sequence: int
    chip_revision: Optional[ChipRevision] = None


class TransferState(Enum):
    """Block transfer engine state."""
    READ_RECORD = "read_record"
    SEND_BLOCK = "send_block"
    AWAIT_ACK = "await_ack"
    DONE = "done"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.name


def probe_chip_revision(
    transport: BulkTransport,
    config: Optional[DownloadConfig] = None,
) -> ChipRevision:
    """
    Query the chip revision with the extended ack probe.

    The probe is sent once, without retry. A response without the extended
    magic is not an error: the default revision (USB8797_A0) is reported.

    Args:
        transport: Bulk transport to the device
        config: Endpoints, timeout and buffer sizes

    Returns:
        ChipRevision with the revision and whether the device supplied it

    Raises:
        TransportError: If the probe write or read fails
    """
    config = config or DownloadConfig()

    transport.write(
        config.out_endpoint,
        encode_chip_rev_query(config.chip_rev_tx_size),
        config.timeout_ms,
    )
    raw = transport.read(config.in_endpoint, config.rx_buffer_size, config.timeout_ms)

    if len(raw) < ChipRevResponse.SIZE:
        # Short replies read as a zero-filled buffer: no extended magic
        logger.warning("Short chiprev response (%d bytes)", len(raw))
        raw = bytes(raw).ljust(ChipRevResponse.SIZE, b"\x00")

    pkt = ChipRevResponse.decode(raw)
    logger.debug("Chiprev resp: %s", pkt)

    if pkt.is_extended:
        logger.info("Chip Rev: 0x%08x (from response)", pkt.chip_revision)
        return ChipRevision(pkt.chip_revision, from_response=True, response=pkt)

    logger.info("Chip Rev: 0x%08x (default)", USB8797_A0)
    return ChipRevision(USB8797_A0, from_response=False, response=pkt)


class BlockTransferEngine:
    """
    Drives a firmware image through the send/ack/retry loop.

    Example:
        engine = BlockTransferEngine(transport)
        result = engine.run(FirmwareImage.from_file("fw.bin"))
    """

    def __init__(
        self,
        transport: BulkTransport,
        config: Optional[DownloadConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            transport: Bulk transport to the device, used exclusively
            config: Endpoints, timing, retry budget and sentinels
            sleep: Backoff function, replaced in tests
        """
        self._transport = transport
        self.config = config or DownloadConfig()
        self._sleep = sleep
        self.state = TransferState.READ_RECORD
        self.sequence_number = 0
        self.retries = self.config.max_retries

    def run(
        self,
        image: Union[FirmwareImage, bytes],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> DownloadResult:
        """
        Download an image, block by block, until the last block is acked.

        Args:
            image: FirmwareImage or raw image bytes
            progress_callback: Optional callback(image_offset, image_size),
                called after every accepted block

        Returns:
            DownloadResult

        Raises:
            TruncatedImage: If the image is malformed or has no last block
            DeviceCrcError: If the device reports a CRC error
            SequenceMismatch: If an ack echoes the wrong sequence number
            ExhaustedRetries: If one block fails max_retries transfers
            TruncatedFrame: If an ack is shorter than 8 bytes
        """
        if not isinstance(image, FirmwareImage):
            image = FirmwareImage(image, self.config.no_data_command)

        self.sequence_number = 0
        self.retries = self.config.max_retries
        try:
            return self._run(image, progress_callback)
        except Exception:
            self.state = TransferState.FAILED
            raise

    def _run(
        self,
        image: FirmwareImage,
        progress_callback: Optional[ProgressCallback],
    ) -> DownloadResult:
        bytes_sent = 0

        while True:
            self.state = TransferState.READ_RECORD
            record = image.next_record()
            if record is None:
                raise TruncatedImage(
                    f"Image ended after {self.sequence_number} blocks without a last block"
                )
            header, payload = record
            logger.debug("FW Header: %s", header)

            block = DataBlock(header, self.sequence_number, payload)
            self._exchange(block)
            bytes_sent += len(block)

            if progress_callback:
                progress_callback(image.offset, image.size)

            # Exact match; the sentinel is not treated as a flag bit
            if header.download_command == self.config.last_block_command:
                self.state = TransferState.DONE
                logger.info("Last block - finished!")
                return DownloadResult(
                    blocks_sent=self.sequence_number + 1,
                    bytes_sent=bytes_sent,
                    last_sequence=self.sequence_number,
                )

            self.retries = self.config.max_retries
            self.sequence_number += 1

    def _exchange(self, block: DataBlock) -> SyncAck:
        """Send one block and wait for its ack, retrying transport failures."""
        data = block.encode()
        seq = block.sequence_number

        while True:
            try:
                self.state = TransferState.SEND_BLOCK
                logger.debug("Sending packet, seq: %d (%d bytes)", seq, len(data))
                self._transport.write(self.config.out_endpoint, data, self.config.timeout_ms)

                self.state = TransferState.AWAIT_ACK
                raw = self._transport.read(
                    self.config.in_endpoint, self.config.rx_buffer_size, self.config.timeout_ms
                )
            except TransportError as e:
                self.retries -= 1
                logger.warning("Block %d: %s (%d retries left)", seq, e, self.retries)
                self._sleep(self.config.retry_delay)
                if self.retries <= 0:
                    raise ExhaustedRetries(seq, self.config.max_retries) from e
                continue

            ack = SyncAck.decode(raw)
            logger.debug("Sync header: %s", ack)

            if ack.is_crc_error:
                raise DeviceCrcError(seq, ack.status_command)
            if ack.sequence_number != seq:
                raise SequenceMismatch(expected=seq, received=ack.sequence_number)
            return ack


def download_firmware(
    transport: BulkTransport,
    image: Union[FirmwareImage, bytes],
    config: Optional[DownloadConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> DownloadResult:
    """
    Probe the chip revision, then download the image.

    The probe result is informational only; the download runs whatever the
    device answers.

    Returns:
        DownloadResult with chip_revision filled in

    Raises:
        MvusbError: Any probe transport error or fatal download error
    """
    config = config or DownloadConfig()
    chip_rev = probe_chip_revision(transport, config)

    engine = BlockTransferEngine(transport, config, sleep=sleep)
    result = engine.run(image, progress_callback)
    result.chip_revision = chip_rev
    return result
