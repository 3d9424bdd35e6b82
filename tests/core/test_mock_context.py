"""Tests for MockContext and FakePort test helpers."""

import subprocess

import pytest

from hpcnic.core.ethtool import HardwareQueryError
from hpcnic.core.models import RingSettings
from tests.conftest import sysfs, sysfs_interface


class TestMockContext:
    """Tests for MockContext fixture."""

    def test_check_tool_with_available(self, mock_context):
        """MockContext reports tools as available."""
        ctx = mock_context(tools_available=["ethtool"])
        assert ctx.check_tool("ethtool") is True
        assert ctx.check_tool("missing") is False

    def test_run_returns_mocked_output(self, mock_context):
        """MockContext returns configured command outputs."""
        ctx = mock_context(command_outputs={("ethtool", "-i", "eth0"): "driver: ice\n"})
        result = ctx.run(["ethtool", "-i", "eth0"])
        assert result.stdout == "driver: ice\n"
        assert result.returncode == 0
        assert ["ethtool", "-i", "eth0"] in ctx.commands_run

    def test_run_passes_through_completed_process(self, mock_context):
        """MockContext returns a CompletedProcess as given."""
        failed = subprocess.CompletedProcess([], returncode=1, stdout="", stderr="no")
        ctx = mock_context(command_outputs={("ethtool", "eth9"): failed})
        assert ctx.run(["ethtool", "eth9"]).returncode == 1

    def test_run_raises_on_unmocked_command(self, mock_context):
        """MockContext raises for commands not in mock."""
        ctx = mock_context()
        with pytest.raises(KeyError):
            ctx.run(["unmocked"])

    def test_read_file_raises_configured_error(self, mock_context):
        """MockContext raises exceptions stored as file contents."""
        ctx = mock_context(file_contents={"/sys/class/net/eth0/speed": OSError(22, "EINVAL")})
        with pytest.raises(OSError):
            ctx.read_file("/sys/class/net/eth0/speed")

    def test_list_dir_derives_entries(self, mock_context):
        """list_dir() lists the first path component below the directory."""
        ctx = mock_context(file_contents=sysfs(sysfs_interface("eth0")))
        assert ctx.list_dir("/sys/class/net") == ["eth0", "lo"]

    def test_file_exists_for_directories(self, mock_context):
        """file_exists() is True for directories above mocked files."""
        ctx = mock_context(file_contents=sysfs_interface("veth0", device=False, virtual=True))
        assert ctx.file_exists("/sys/devices/virtual/net/veth0") is True
        assert ctx.file_exists("/sys/devices/virtual/net/eth0") is False


class TestFakePort:
    """Tests for FakePort."""

    def test_missing_field_raises(self, fake_port):
        port = fake_port({"eth0": {"speed": 200000}})
        assert port.speed_of("eth0") == 200000
        with pytest.raises(HardwareQueryError):
            port.driver_of("eth0")
        with pytest.raises(HardwareQueryError):
            port.speed_of("eth9")

    def test_set_ring_updates_state(self, fake_port):
        port = fake_port({"eth0": {"ring": RingSettings(512, 512, 4096, 4096)}})
        port.set_ring("eth0", 4096, 4096)
        assert port.ring_settings_of("eth0") == RingSettings(4096, 4096, 4096, 4096)
        assert port.set_calls == [("eth0", 4096, 4096)]
        assert port.peak_in_flight == 1
        assert port.in_flight == 0
