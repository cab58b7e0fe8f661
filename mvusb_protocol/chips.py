# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Supported Marvell chips and USB device discovery."""

import logging
from enum import Enum
from typing import Tuple

import usb.core

from .exceptions import DeviceNotFound, UnsupportedDevice

logger = logging.getLogger(__name__)

MARVELL_VENDOR_ID = 0x1286


class MarvellChip(Enum):
    """Chip variants that boot from the USB download protocol."""
    AVASTAR_88W8782U = 0x2040
    AVASTAR_88W8897 = 0x2045

    @property
    def product_id(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.name


def chip_for_product_id(product_id: int) -> MarvellChip:
    """
    Map a USB product id to a chip variant.

    Raises:
        UnsupportedDevice: If the product id is not a known boot-mode chip
    """
    if product_id == 0x2040:
        return MarvellChip.AVASTAR_88W8782U
    elif product_id == 0x2045:
        return MarvellChip.AVASTAR_88W8897
    else:
        raise UnsupportedDevice(product_id)


def find_device(vendor_id: int = MARVELL_VENDOR_ID) -> Tuple[usb.core.Device, MarvellChip]:
    """
    Find the first attached device from the vendor and identify its chip.

    Only the first matching device is considered; an unknown product id is
    an error rather than a reason to keep scanning.

    Returns:
        Tuple of (PyUSB device, chip variant)

    Raises:
        DeviceNotFound: If no device from the vendor is attached
        UnsupportedDevice: If the first device has an unknown product id
    """
    dev = usb.core.find(idVendor=vendor_id)
    if dev is None:
        raise DeviceNotFound("No device found!")

    logger.info(
        "Found marvell device: Bus %03d Device %03d ID %04x:%04x",
        dev.bus, dev.address, dev.idVendor, dev.idProduct,
    )
    return dev, chip_for_product_id(dev.idProduct)
