#!/usr/bin/env python3

"""
Tests for driver process supervision.

Real child processes are started with the current Python interpreter
standing in for a driver executable; platform branching is checked with
mocks.
"""

import signal
import subprocess
import sys
import time
from unittest import mock

import pytest

from WebDriverController.execution_manager import (
    IS_LINUX,
    IS_WINDOWS,
    OUTPUT_TAIL_LINES,
    DriverProcess,
    ProcessOptions,
    ProcessSupervisor,
)
from WebDriverController.exceptions import ProcessExitedError, ProcessSpawnError

SLEEPER = "import time; time.sleep(60)"

STUBBORN = (
    "import signal, sys, time\n"
    "signal.signal(signal.SIGINT, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(60)\n"
)

CHATTY = "import sys; sys.stdout.write(('x' * 99 + '\\n') * 20000 + 'done\\n')"


def wait_for_output(process, text, timeout=30):
    deadline = time.monotonic() + timeout
    while text not in process.read_output():
        assert time.monotonic() < deadline, "driver never wrote {!r}".format(text)
        time.sleep(0.05)


@pytest.fixture
def supervisor():
    return ProcessSupervisor(graceful_timeout=5, kill_timeout=5)


@pytest.fixture
def started(supervisor):
    """Processes started by a test are stopped afterwards"""
    processes = []
    yield processes
    for process in processes:
        supervisor.stop(process)


# ---------------------------------------------------------------------------
# Spawning
# ---------------------------------------------------------------------------

class TestStart:
    """Starting driver executables"""

    def test_missing_executable(self, supervisor):
        with pytest.raises(ProcessSpawnError):
            supervisor.start("no-such-driver-executable-xyz", port=4444)

    def test_no_executable_configured(self, supervisor):
        with pytest.raises(ProcessSpawnError):
            supervisor.start(None, port=4444)

    def test_invalid_stdio(self, supervisor):
        with pytest.raises(ValueError):
            supervisor.start(sys.executable, port=4444, stdio="tty")

    def test_port_argument_appended(self, supervisor, started):
        process = supervisor.start(sys.executable, port=5555, args=["-c", SLEEPER],
                                   port_argument="--port={port}")
        started.append(process)
        assert process.command[-1] == "--port=5555"
        assert process.command[1:3] == ["-c", SLEEPER]
        assert process.port == 5555
        assert process.is_running()
        assert process.pid > 0

    def test_no_port_argument(self, supervisor, started):
        process = supervisor.start(sys.executable, port=5555, args=["-c", SLEEPER])
        started.append(process)
        assert process.command[-1] == SLEEPER

    def test_environment_is_merged(self, supervisor, started):
        script = "import os, sys; sys.exit(0 if os.environ.get('WDC_TEST') == 'on' and os.environ.get('PATH') else 1)"
        process = supervisor.start(sys.executable, port=5555, args=["-c", script], env={"WDC_TEST": "on"})
        started.append(process)
        assert process.popen.wait(timeout=30) == 0

    def test_spawn_oserror_is_wrapped(self, supervisor):
        with mock.patch('subprocess.Popen', side_effect=PermissionError("denied")):
            with pytest.raises(ProcessSpawnError):
                supervisor.start(sys.executable, port=4444)

    @pytest.mark.skipif(not IS_LINUX, reason="Linux-only test")
    def test_linux_uses_preexec_fn(self, supervisor):
        with mock.patch('subprocess.Popen') as mock_popen:
            supervisor.start(sys.executable, port=4444)
        _, kwargs = mock_popen.call_args
        assert kwargs['preexec_fn'] is not None
        assert 'creationflags' not in kwargs

    @pytest.mark.skipif(not IS_WINDOWS, reason="Windows-only test")
    def test_windows_uses_creation_flags(self, supervisor):
        with mock.patch('subprocess.Popen') as mock_popen:
            supervisor.start(sys.executable, port=4444)
        _, kwargs = mock_popen.call_args
        assert kwargs['creationflags'] == subprocess.CREATE_NEW_PROCESS_GROUP
        assert 'preexec_fn' not in kwargs


# ---------------------------------------------------------------------------
# Liveness
# ---------------------------------------------------------------------------

class TestCheckAlive:
    """Noticing early exits"""

    def test_running_process(self, supervisor, started):
        process = supervisor.start(sys.executable, port=5555, args=["-c", SLEEPER])
        started.append(process)
        supervisor.check_alive(process)

    def test_exited_process(self, supervisor, started):
        script = "import sys; sys.stderr.write('address in use'); sys.exit(3)"
        process = supervisor.start(sys.executable, port=5555, args=["-c", script], stdio="pipe")
        started.append(process)
        process.popen.wait(timeout=30)

        with pytest.raises(ProcessExitedError) as excinfo:
            supervisor.check_alive(process)
        assert excinfo.value.exit_code == 3
        assert "address in use" in excinfo.value.output


class TestOutput:
    """Piped driver output"""

    def test_large_output_does_not_block_driver(self, supervisor, started):
        process = supervisor.start(sys.executable, port=5555, args=["-c", CHATTY], stdio="pipe")
        started.append(process)

        assert process.popen.wait(timeout=30) == 0
        lines = process.read_output().splitlines()
        assert lines[-1] == "done"
        assert len(lines) == OUTPUT_TAIL_LINES

    def test_no_output_collected_without_pipe(self, supervisor, started):
        process = supervisor.start(sys.executable, port=5555, args=["-c", "print('hello')"])
        started.append(process)
        process.popen.wait(timeout=30)
        assert process.read_output() == ""

    def test_pipes_closed_after_stop(self, supervisor):
        process = supervisor.start(sys.executable, port=5555, args=["-c", SLEEPER], stdio="pipe")
        supervisor.stop(process)
        assert process.popen.stdout.closed
        assert process.popen.stderr.closed


# ---------------------------------------------------------------------------
# Stopping
# ---------------------------------------------------------------------------

class TestStop:
    """Shutting down driver processes"""

    def test_stop_running_process(self, supervisor):
        process = supervisor.start(sys.executable, port=5555, args=["-c", SLEEPER])
        supervisor.stop(process)
        assert not process.is_running()

    def test_stop_twice(self, supervisor):
        process = supervisor.start(sys.executable, port=5555, args=["-c", SLEEPER])
        supervisor.stop(process)
        supervisor.stop(process)
        assert not process.is_running()

    def test_stop_none(self, supervisor):
        supervisor.stop(None)
        supervisor.interrupt(None)

    def test_interrupt_does_not_wait(self, supervisor):
        process = self._mock_process()
        with mock.patch('os.kill'):
            supervisor.interrupt(process)
        process.popen.wait.assert_not_called()

    @pytest.mark.skipif(IS_WINDOWS, reason="SIGINT escalation is POSIX-only")
    def test_kill_after_graceful_timeout(self, supervisor):
        process = supervisor.start(sys.executable, port=5555, args=["-c", STUBBORN], stdio="pipe")
        wait_for_output(process, "ready")

        supervisor.stop(process, graceful_timeout=0.5)
        assert not process.is_running()
        assert process.returncode == -signal.SIGKILL

    def _mock_process(self):
        popen = mock.Mock()
        popen.poll.return_value = None
        popen.pid = 12345
        popen.wait.return_value = 0
        popen.stdout = None
        popen.stderr = None
        return DriverProcess(popen, "driver", 4444, ["driver", "--port=4444"])

    @pytest.mark.skipif(not IS_LINUX, reason="Linux-only test")
    def test_linux_uses_sigint(self, supervisor):
        process = self._mock_process()
        with mock.patch('os.kill') as mock_kill:
            supervisor.stop(process)
        mock_kill.assert_called_once_with(12345, signal.SIGINT)
        process.popen.kill.assert_not_called()

    @pytest.mark.skipif(not IS_WINDOWS, reason="Windows-only test")
    def test_windows_uses_terminate(self, supervisor):
        process = self._mock_process()
        supervisor.stop(process)
        process.popen.terminate.assert_called_once()

    def test_already_dead_process(self, supervisor):
        process = self._mock_process()
        process.popen.poll.return_value = 0
        with mock.patch('os.kill') as mock_kill:
            supervisor.stop(process)
        mock_kill.assert_not_called()
        process.popen.terminate.assert_not_called()
        process.popen.kill.assert_not_called()


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class TestProcessOptions:
    """Driver location options"""

    def test_local_by_default(self):
        options = ProcessOptions(executable="geckodriver")
        assert options.is_local
        assert options.port is None
        assert options.port_argument == "--port={port}"

    def test_endpoint_means_remote(self):
        assert not ProcessOptions(endpoint="http://grid:4444").is_local

    def test_invalid_stdio(self):
        with pytest.raises(ValueError):
            ProcessOptions(stdio="console")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
