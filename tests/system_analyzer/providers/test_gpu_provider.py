"""Unit tests for system_analyzer.providers.gpu_provider module."""

#      Copyright (c) 2025 predator. All rights reserved.

import subprocess
import unittest
from unittest.mock import MagicMock, patch

from system_analyzer.core.errors import IntegrationUnavailable
from system_analyzer.providers.gpu_provider import (
    AbsentAccelerator,
    NvidiaSmiAccelerator,
    NvmlAccelerator,
    probe_accelerator,
)


def _nvml_mock():
    nvml = MagicMock()
    nvml.nvmlDeviceGetCount.return_value = 1
    nvml.nvmlDeviceGetName.return_value = b'NVIDIA GeForce RTX 3080'
    nvml.nvmlDeviceGetUtilizationRates.return_value = MagicMock(gpu=42)
    nvml.nvmlDeviceGetMemoryInfo.return_value = MagicMock(used=2 * 1024**3, total=8 * 1024**3)
    nvml.nvmlDeviceGetTemperature.return_value = 63
    return nvml


class TestAbsentAccelerator(unittest.TestCase):
    """Test AbsentAccelerator."""

    def test_never_has_data(self):
        """Test that the stub reports no device and no data."""
        provider = AbsentAccelerator()

        self.assertFalse(provider.present)
        self.assertEqual(provider.method, 'none')
        self.assertIsNone(provider.first_device_metrics())
        self.assertIsNone(provider.clock_rates_mhz())
        provider.shutdown()


class TestNvmlAccelerator(unittest.TestCase):
    """Test NvmlAccelerator."""

    def test_initialization(self):
        """Test that the device name is decoded."""
        with patch('system_analyzer.providers.gpu_provider.pynvml', _nvml_mock()):
            provider = NvmlAccelerator()

        self.assertEqual(provider.method, 'nvml')
        self.assertEqual(provider.device_name, 'NVIDIA GeForce RTX 3080')
        self.assertTrue(provider.present)

    def test_init_failure(self):
        """Test that an NVML init error becomes IntegrationUnavailable."""
        nvml = _nvml_mock()
        nvml.nvmlInit.side_effect = RuntimeError("NVML Shared Library Not Found")

        with patch('system_analyzer.providers.gpu_provider.pynvml', nvml):
            with self.assertRaises(IntegrationUnavailable):
                NvmlAccelerator()

    def test_no_devices(self):
        """Test that zero devices is unavailable and NVML is shut down."""
        nvml = _nvml_mock()
        nvml.nvmlDeviceGetCount.return_value = 0

        with patch('system_analyzer.providers.gpu_provider.pynvml', nvml):
            with self.assertRaises(IntegrationUnavailable):
                NvmlAccelerator()

        nvml.nvmlShutdown.assert_called_once()

    def test_metrics(self):
        """Test utilization, memory percent and temperature."""
        with patch('system_analyzer.providers.gpu_provider.pynvml', _nvml_mock()):
            provider = NvmlAccelerator()
            metrics = provider.first_device_metrics()

        self.assertEqual(metrics, (42.0, 25.0, 63.0))

    def test_metrics_failure(self):
        """Test that a failing poll gives None."""
        nvml = _nvml_mock()
        nvml.nvmlDeviceGetUtilizationRates.side_effect = RuntimeError("GPU is lost")

        with patch('system_analyzer.providers.gpu_provider.pynvml', nvml):
            provider = NvmlAccelerator()
            self.assertIsNone(provider.first_device_metrics())

    def test_clocks(self):
        """Test clock rates in graphics, SM, memory, video order."""
        nvml = _nvml_mock()
        clocks = {
            nvml.NVML_CLOCK_GRAPHICS: 1800,
            nvml.NVML_CLOCK_SM: 1750,
            nvml.NVML_CLOCK_MEM: 7000,
            nvml.NVML_CLOCK_VIDEO: 1500,
        }
        nvml.nvmlDeviceGetClockInfo.side_effect = lambda handle, kind: clocks[kind]

        with patch('system_analyzer.providers.gpu_provider.pynvml', nvml):
            provider = NvmlAccelerator()
            rates = provider.clock_rates_mhz()

        self.assertEqual(rates, (1800.0, 1750.0, 7000.0, 1500.0))

    def test_clocks_fall_back_to_graphics(self):
        """Test that missing SM and video clocks reuse the graphics clock."""
        nvml = _nvml_mock()

        def clock_info(handle, kind):
            if kind is nvml.NVML_CLOCK_GRAPHICS:
                return 1800
            if kind is nvml.NVML_CLOCK_MEM:
                return 7000
            raise RuntimeError("Not Supported")

        nvml.nvmlDeviceGetClockInfo.side_effect = clock_info

        with patch('system_analyzer.providers.gpu_provider.pynvml', nvml):
            provider = NvmlAccelerator()
            rates = provider.clock_rates_mhz()

        self.assertEqual(rates, (1800.0, 1800.0, 7000.0, 1800.0))

    def test_shutdown(self):
        """Test that shutdown releases NVML."""
        nvml = _nvml_mock()

        with patch('system_analyzer.providers.gpu_provider.pynvml', nvml):
            provider = NvmlAccelerator()
            provider.shutdown()

        nvml.nvmlShutdown.assert_called_once()


class TestNvidiaSmiAccelerator(unittest.TestCase):
    """Test NvidiaSmiAccelerator."""

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    def test_not_installed(self, mock_which):
        """Test that a missing nvidia-smi is unavailable."""
        mock_which.return_value = None

        with self.assertRaises(IntegrationUnavailable):
            NvidiaSmiAccelerator()

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    @patch('system_analyzer.providers.gpu_provider.subprocess.run')
    def test_initialization(self, mock_run, mock_which):
        """Test that the first device name is queried."""
        mock_which.return_value = '/usr/bin/nvidia-smi'
        mock_run.return_value = MagicMock(stdout='NVIDIA GeForce RTX 4090\n', returncode=0)

        provider = NvidiaSmiAccelerator()

        self.assertEqual(provider.method, 'nvidia-smi')
        self.assertEqual(provider.device_name, 'NVIDIA GeForce RTX 4090')
        cmd = mock_run.call_args[0][0]
        self.assertIn('--query-gpu=name', cmd)
        self.assertIn('--id=0', cmd)

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    @patch('system_analyzer.providers.gpu_provider.subprocess.run')
    def test_metrics(self, mock_run, mock_which):
        """Test parsing a metrics query."""
        mock_which.return_value = '/usr/bin/nvidia-smi'
        mock_run.side_effect = [
            MagicMock(stdout='NVIDIA GeForce RTX 4090\n', returncode=0),
            MagicMock(stdout='37, 6144, 24576, 58\n', returncode=0),
        ]

        provider = NvidiaSmiAccelerator()

        self.assertEqual(provider.first_device_metrics(), (37.0, 25.0, 58.0))

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    @patch('system_analyzer.providers.gpu_provider.subprocess.run')
    def test_clocks_not_supported(self, mock_run, mock_which):
        """Test that unsupported SM and video clocks fall back to graphics."""
        mock_which.return_value = '/usr/bin/nvidia-smi'
        mock_run.side_effect = [
            MagicMock(stdout='Tesla T4\n', returncode=0),
            MagicMock(stdout='585, [N/A], 5000, [Not Supported]\n', returncode=0),
        ]

        provider = NvidiaSmiAccelerator()

        self.assertEqual(provider.clock_rates_mhz(), (585.0, 585.0, 5000.0, 585.0))

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    @patch('system_analyzer.providers.gpu_provider.subprocess.run')
    def test_query_timeout(self, mock_run, mock_which):
        """Test that a hung nvidia-smi yields no data."""
        mock_which.return_value = '/usr/bin/nvidia-smi'
        mock_run.side_effect = [
            MagicMock(stdout='Tesla T4\n', returncode=0),
            subprocess.TimeoutExpired('nvidia-smi', 1.5),
        ]

        provider = NvidiaSmiAccelerator()

        self.assertIsNone(provider.first_device_metrics())

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    @patch('system_analyzer.providers.gpu_provider.subprocess.run')
    def test_query_error_code(self, mock_run, mock_which):
        """Test that a non-zero exit yields no data."""
        mock_which.return_value = '/usr/bin/nvidia-smi'
        mock_run.side_effect = [
            MagicMock(stdout='Tesla T4\n', returncode=0),
            MagicMock(stdout='', returncode=9),
        ]

        provider = NvidiaSmiAccelerator()

        self.assertIsNone(provider.clock_rates_mhz())


class TestProbeAccelerator(unittest.TestCase):
    """Test probe_accelerator."""

    def test_none(self):
        """Test that mode none never touches a backend."""
        with patch('system_analyzer.providers.gpu_provider.NvmlAccelerator') as nvml:
            provider = probe_accelerator("none")

        self.assertIsInstance(provider, AbsentAccelerator)
        nvml.assert_not_called()

    def test_unknown_mode(self):
        """Test that an unknown mode is rejected."""
        with self.assertRaises(ValueError):
            probe_accelerator("cuda")

    def test_auto_prefers_nvml(self):
        """Test that auto returns NVML when it initializes."""
        with patch('system_analyzer.providers.gpu_provider.pynvml', _nvml_mock()):
            provider = probe_accelerator("auto")

        self.assertIsInstance(provider, NvmlAccelerator)

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    @patch('system_analyzer.providers.gpu_provider.subprocess.run')
    def test_auto_falls_back_to_smi(self, mock_run, mock_which):
        """Test that auto uses nvidia-smi when NVML fails."""
        nvml = _nvml_mock()
        nvml.nvmlInit.side_effect = RuntimeError("no driver")
        mock_which.return_value = '/usr/bin/nvidia-smi'
        mock_run.return_value = MagicMock(stdout='Tesla T4\n', returncode=0)

        with patch('system_analyzer.providers.gpu_provider.pynvml', nvml):
            provider = probe_accelerator("auto")

        self.assertIsInstance(provider, NvidiaSmiAccelerator)

    @patch('system_analyzer.providers.gpu_provider.shutil.which')
    def test_nothing_available(self, mock_which):
        """Test that a requested but missing backend degrades to absent."""
        mock_which.return_value = None

        with self.assertLogs('system_analyzer.providers.gpu_provider', level='WARNING'):
            provider = probe_accelerator("nvidia-smi")

        self.assertIsInstance(provider, AbsentAccelerator)


if __name__ == '__main__':
    unittest.main()
