# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Transport layer for Marvell USB boot ROM communication.

BulkTransport is the capability the download engine needs (bulk write and
bulk read with a timeout). UsbTransport implements it on top of PyUSB.
"""

import logging
from abc import ABC, abstractmethod

import usb.core
import usb.util

from .exceptions import TimeoutError, TransportError

logger = logging.getLogger(__name__)


class BulkTransport(ABC):
    """Bulk endpoint access used by the prober and the download engine."""

    @abstractmethod
    def write(self, endpoint: int, data: bytes, timeout_ms: int) -> int:
        """
        Write data to a bulk-out endpoint.

        Returns:
            Number of bytes written

        Raises:
            TransportError: If the transfer fails
            TimeoutError: If the transfer times out
        """

    @abstractmethod
    def read(self, endpoint: int, size: int, timeout_ms: int) -> bytes:
        """
        Read up to size bytes from a bulk-in endpoint.

        Raises:
            TransportError: If the transfer fails
            TimeoutError: If the transfer times out
        """

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class UsbTransport(BulkTransport):
    """
    PyUSB transport bound to one claimed interface.

    Can be used as a context manager:
        with UsbTransport(device) as t:
            t.write(0x01, data, 100)
    """

    def __init__(self, device: usb.core.Device, interface: int = 0):
        """
        Claim an interface on an attached device.

        Args:
            device: PyUSB device, e.g. from usb.core.find()
            interface: Interface number to claim (default 0)

        Raises:
            TransportError: If the interface cannot be claimed
        """
        self._dev = device
        self._interface = interface
        self._claimed = False

        self._detach_kernel_driver()
        try:
            usb.util.claim_interface(self._dev, self._interface)
        except usb.core.USBError as e:
            usb.util.dispose_resources(self._dev)
            raise TransportError(f"Cannot claim interface {interface}: {e}") from e
        self._claimed = True

    def _detach_kernel_driver(self):
        # Windows backends do not implement the kernel driver calls
        try:
            if self._dev.is_kernel_driver_active(self._interface):
                logger.debug("Detaching kernel driver from interface %d", self._interface)
                self._dev.detach_kernel_driver(self._interface)
        except NotImplementedError:
            pass
        except usb.core.USBError as e:
            logger.debug("Kernel driver detach failed: %s", e)

    @property
    def device(self) -> usb.core.Device:
        return self._dev

    def close(self):
        """Release the interface and free the device handle."""
        if self._claimed:
            try:
                usb.util.release_interface(self._dev, self._interface)
            except usb.core.USBError as e:
                logger.warning("Failed to release interface %d: %s", self._interface, e)
            self._claimed = False
        usb.util.dispose_resources(self._dev)

    def write(self, endpoint: int, data: bytes, timeout_ms: int) -> int:
        try:
            return self._dev.write(endpoint, data, timeout=timeout_ms)
        except usb.core.USBTimeoutError as e:
            raise TimeoutError(f"Bulk write to 0x{endpoint:02x} timed out") from e
        except usb.core.USBError as e:
            raise TransportError(f"Bulk write to 0x{endpoint:02x} failed: {e}") from e

    def read(self, endpoint: int, size: int, timeout_ms: int) -> bytes:
        try:
            return bytes(self._dev.read(endpoint, size, timeout=timeout_ms))
        except usb.core.USBTimeoutError as e:
            raise TimeoutError(f"Bulk read from 0x{endpoint:02x} timed out") from e
        except usb.core.USBError as e:
            raise TransportError(f"Bulk read from 0x{endpoint:02x} failed: {e}") from e
