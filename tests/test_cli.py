# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Tests for the mvusb_download command-line tool."""

import pytest
from unittest.mock import Mock, patch

import usb.core

import mvusb_download
from mvusb_protocol.chips import MarvellChip
from mvusb_protocol.config import DownloadConfig
from mvusb_protocol.download import ChipRevision, DownloadResult
from mvusb_protocol.exceptions import DeviceNotFound, ExhaustedRetries, UnsupportedDevice

from helpers import make_image


@pytest.fixture
def firmware(tmp_path):
    path = tmp_path / "fw.bin"
    path.write_bytes(make_image(b"abc", b"def"))
    return path


@pytest.fixture
def device():
    dev = Mock()
    dev.bus = 1
    dev.address = 4
    dev.idVendor = 0x1286
    dev.idProduct = 0x2045
    return dev


def ok_result():
    return DownloadResult(
        blocks_sent=2, bytes_sent=46, last_sequence=1,
        chip_revision=ChipRevision(0x03800010, from_response=True),
    )


class TestMain:
    """Tests for argument handling and exit codes."""

    def test_missing_file(self, tmp_path, capsys):
        """A missing firmware file exits with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(tmp_path / "nope.bin")])

        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().out

    def test_no_arguments(self):
        """The firmware path is required."""
        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([])
        assert exc_info.value.code == 2

    def test_invalid_retries(self, firmware):
        """A retry count below 1 is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(firmware), "--retries", "0"])
        assert exc_info.value.code == 2

    @patch("mvusb_download.cmd_download")
    def test_passes_overrides(self, mock_cmd, firmware):
        """Command-line flags override config defaults."""
        mvusb_download.main([str(firmware), "--timeout", "250", "--retries", "5", "-i", "1"])

        path, config = mock_cmd.call_args[0]
        assert path == firmware
        assert config == DownloadConfig(timeout_ms=250, max_retries=5, interface=1)

    @patch("mvusb_download.find_device")
    def test_no_device(self, mock_find, firmware, capsys):
        """No attached device exits with an error message."""
        mock_find.side_effect = DeviceNotFound("No device found!")

        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(firmware)])

        assert exc_info.value.code == 1
        assert "Error: No device found!" in capsys.readouterr().out

    @patch("mvusb_download.find_device")
    def test_unsupported_device(self, mock_find, firmware, capsys):
        """An unknown product id exits with an error message."""
        mock_find.side_effect = UnsupportedDevice(0x2099)

        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(firmware)])

        assert exc_info.value.code == 1
        assert "0x2099" in capsys.readouterr().out

    @patch("mvusb_download.find_device")
    def test_no_usb_backend(self, mock_find, firmware, capsys):
        """A missing libusb backend exits with an error message."""
        mock_find.side_effect = usb.core.NoBackendError("No backend available")

        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(firmware)])

        assert exc_info.value.code == 1
        assert "Error: No backend available" in capsys.readouterr().out

    def test_unreadable_firmware(self, tmp_path, capsys):
        """A firmware path that cannot be read exits with an error message."""
        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(tmp_path)])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().out

    @patch("mvusb_download.UsbTransport")
    @patch("mvusb_download.find_device")
    def test_usb_permission_error(self, mock_find, mock_transport_class, firmware, device, capsys):
        """An OSError while opening the device exits with an error message."""
        mock_find.return_value = (device, MarvellChip.AVASTAR_88W8897)
        mock_transport_class.side_effect = PermissionError("Access denied")

        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(firmware)])

        assert exc_info.value.code == 1
        assert "Error: Access denied" in capsys.readouterr().out


class TestCmdDownload:
    """Tests for the download command."""

    @patch("mvusb_download.download_firmware")
    @patch("mvusb_download.UsbTransport")
    @patch("mvusb_download.find_device")
    def test_success(self, mock_find, mock_transport_class, mock_download,
                     firmware, device, capsys):
        """A successful download prints the result."""
        mock_find.return_value = (device, MarvellChip.AVASTAR_88W8897)
        transport = mock_transport_class.return_value.__enter__.return_value
        mock_download.return_value = ok_result()

        assert mvusb_download.cmd_download(firmware, DownloadConfig()) is True

        mock_transport_class.assert_called_once_with(device, interface=0)
        assert mock_download.call_args[0][0] is transport
        out = capsys.readouterr().out
        assert "AVASTAR_88W8897" in out
        assert "0x03800010 (from response)" in out
        assert "successfully" in out

    @patch("mvusb_download.download_firmware")
    @patch("mvusb_download.UsbTransport")
    @patch("mvusb_download.find_device")
    def test_download_failure_exits(self, mock_find, mock_transport_class, mock_download,
                                    firmware, device, capsys):
        """A fatal download error exits with status 1 and releases the device."""
        mock_find.return_value = (device, MarvellChip.AVASTAR_88W8782U)
        mock_transport_class.return_value.__exit__.return_value = False
        mock_download.side_effect = ExhaustedRetries(3, 3)

        with pytest.raises(SystemExit) as exc_info:
            mvusb_download.main([str(firmware)])

        assert exc_info.value.code == 1
        mock_transport_class.return_value.__exit__.assert_called_once()
        assert "Error: FW download did not succeed" in capsys.readouterr().out
