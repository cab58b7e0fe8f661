# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Download configuration.

Every endpoint address, timeout, retry limit and protocol sentinel used by
the download engine lives here so that tests can inject their own values.
"""

from dataclasses import dataclass, fields, replace

from .frames import CHIP_REV_TX_BUF_SIZE, FW_DNLD_RX_BUF_SIZE, FirmwareCommand

USB_BULK_OUT_EP = 0x01
USB_BULK_IN_EP = 0x81
USB_BULK_MSG_TIMEOUT_MS = 100
MAX_FW_RETRY = 3
FW_RETRY_DELAY = 0.1


@dataclass(frozen=True)
class DownloadConfig:
    """Tunables for the chip revision probe and block transfer."""
    out_endpoint: int = USB_BULK_OUT_EP
    in_endpoint: int = USB_BULK_IN_EP
    timeout_ms: int = USB_BULK_MSG_TIMEOUT_MS
    max_retries: int = MAX_FW_RETRY
    retry_delay: float = FW_RETRY_DELAY
    chip_rev_tx_size: int = CHIP_REV_TX_BUF_SIZE
    rx_buffer_size: int = FW_DNLD_RX_BUF_SIZE
    last_block_command: int = FirmwareCommand.LAST_BLOCK
    no_data_command: int = FirmwareCommand.CMD7
    interface: int = 0

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must not be negative, got {self.retry_delay}")
        if self.rx_buffer_size < 1:
            raise ValueError(f"rx_buffer_size must be positive, got {self.rx_buffer_size}")

    def with_overrides(self, **overrides) -> "DownloadConfig":
        """
        Return a copy with the given fields replaced.

        Overrides set to None are ignored, so optional CLI arguments can be
        passed straight through.

        Raises:
            TypeError: If an override names an unknown field
        """
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
