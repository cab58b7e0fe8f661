# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Pytest configuration for unit and integration tests."""

from pathlib import Path

import pytest

from helpers import FakeTransport


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--device-firmware",
        action="store",
        default=None,
        help="Firmware image to download to an attached Marvell device",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless a firmware image was given."""
    if config.getoption("--device-firmware"):
        return
    skip = pytest.mark.skip(reason="needs --device-firmware and an attached device")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def device_firmware(request):
    """Firmware image path from the command line."""
    path = request.config.getoption("--device-firmware")
    return Path(path) if path else None


@pytest.fixture
def sleeps():
    """Record backoff delays instead of sleeping."""
    return []


@pytest.fixture
def fake_transport():
    """Empty scripted transport; tests fill in responses."""
    return FakeTransport()


@pytest.fixture
def usb_transport(device_firmware):
    """
    Claim the attached Marvell device.

    Only used by integration tests.
    """
    from mvusb_protocol import UsbTransport, find_device

    device, _ = find_device()
    transport = UsbTransport(device)
    yield transport
    transport.close()
