#!/usr/bin/env python3

"""
WebDriverController Execution Manager

This module handles the lifetime of driver executables (geckodriver,
chromedriver, ...): spawning them on a port, noticing when they die, and
shutting them down.
"""

import collections
import logging
import os
import shutil
import signal
import subprocess
import sys
import threading
from typing import Dict, List, Optional

from .exceptions import ProcessSpawnError, ProcessExitedError

IS_WINDOWS = sys.platform == 'win32'
IS_LINUX = sys.platform.startswith('linux')

STDIO_MODES = {
    "inherit": None,
    "ignore": subprocess.DEVNULL,
    "pipe": subprocess.PIPE,
}

OUTPUT_TAIL_LINES = 200


class ProcessOptions:
    """
    Where the driver runs and how to start it.

    When `endpoint` is given the driver is assumed to be already running
    (a grid, a remote machine, a driver started by hand) and nothing is
    spawned.
    """

    def __init__(self,
                 executable: Optional[str] = None,
                 port: Optional[int] = None,
                 host: str = "127.0.0.1",
                 args: List[str] = None,
                 env: Dict[str, str] = None,
                 stdio: str = "ignore",
                 port_argument: Optional[str] = "--port={port}",
                 endpoint: Optional[str] = None,
                 startup_timeout: float = 20.0):
        """
        Args:
            executable: Driver executable name or path
            port: Port the driver listens on (None for automatic selection)
            host: Host the driver is reached on
            args: Extra command line arguments for the driver
            env: Environment variables added to the current environment
            stdio: 'inherit', 'ignore' or 'pipe'
            port_argument: Template of the port argument, None to not pass one
            endpoint: Base URL of an already running driver
            startup_timeout: Seconds to wait for the driver to accept a session
        """
        if stdio not in STDIO_MODES:
            raise ValueError("Invalid stdio mode '{}'. Valid modes: {}".format(stdio, list(STDIO_MODES)))
        self.executable = executable
        self.port = port
        self.host = host
        self.args = list(args or [])
        self.env = dict(env or {})
        self.stdio = stdio
        self.port_argument = port_argument
        self.endpoint = endpoint
        self.startup_timeout = startup_timeout

    @property
    def is_local(self) -> bool:
        return self.endpoint is None


class DriverProcess:
    """Handle on a spawned driver executable"""

    def __init__(self, popen: subprocess.Popen, executable: str, port: int, command: List[str]):
        self.popen = popen
        self.executable = executable
        self.port = port
        self.command = command

        # Tail of the piped output; the readers keep the pipes from filling up
        self._output = collections.deque(maxlen=OUTPUT_TAIL_LINES)
        self._readers = []
        self.log = logging.getLogger("WebDriverController.DriverProcess")

    def drain_output(self) -> None:
        """Start one reader thread per piped stream"""
        for name, stream in (("stdout", self.popen.stdout), ("stderr", self.popen.stderr)):
            if stream is None:
                continue
            reader = threading.Thread(target=self._read_stream, args=(stream,),
                                      name="driver-{}-{}".format(self.pid, name), daemon=True)
            reader.start()
            self._readers.append(reader)

    def _read_stream(self, stream) -> None:
        try:
            with stream:
                for raw in iter(stream.readline, b''):
                    line = raw.decode('utf-8', errors='replace').rstrip()
                    self._output.append(line)
                    self.log.debug("[{}] {}".format(self.pid, line))
        except (OSError, ValueError) as e:
            self.log.debug("Stopped reading driver output: {}".format(e))

    def join_readers(self, timeout: float = 1.0) -> None:
        """Wait for the readers to reach end of output (a dead process closes its pipes)"""
        for reader in self._readers:
            reader.join(timeout)

    @property
    def pid(self) -> int:
        return self.popen.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.popen.poll()

    def is_running(self) -> bool:
        return self.popen.poll() is None

    def read_output(self) -> str:
        """Last lines the driver wrote, when stdio is 'pipe'"""
        if not self.is_running():
            self.join_readers()
        return "\n".join(self._output).strip()

    def __repr__(self):
        return "<DriverProcess {} pid={} port={}>".format(self.executable, self.pid, self.port)


class ProcessSupervisor:
    """
    Starts and stops driver executables.

    The supervisor does not wait for the driver to be ready: readiness is
    the driver answering HTTP on its port, which the session client probes.
    """

    def __init__(self, graceful_timeout: float = 5, kill_timeout: float = 5):
        """
        Args:
            graceful_timeout: Seconds to wait after the graceful signal before killing
            kill_timeout: Seconds to wait after killing before giving up
        """
        self.graceful_timeout = graceful_timeout
        self.kill_timeout = kill_timeout
        self.log = logging.getLogger("WebDriverController.ProcessSupervisor")

    def _find_executable(self, executable: str) -> str:
        """
        Resolve the driver executable, either a path or a name on PATH.

        Raises:
            ProcessSpawnError: If the executable is not found
        """
        if not executable:
            raise ProcessSpawnError("No driver executable configured")
        found = shutil.which(executable)
        if found:
            return found
        raise ProcessSpawnError("Driver executable not found: {}".format(executable))

    def start(self,
              executable: str,
              port: int,
              args: List[str] = None,
              env: Dict[str, str] = None,
              stdio: str = "ignore",
              port_argument: Optional[str] = None) -> DriverProcess:
        """
        Spawn a driver executable bound to `port`.

        Args:
            executable: Driver executable name or path
            port: Port the driver should listen on
            args: Command line arguments
            env: Environment variables added to the current environment
            stdio: 'inherit', 'ignore' or 'pipe'
            port_argument: Template such as '--port={port}' appended to the
                           arguments, or None

        Returns:
            DriverProcess handle

        Raises:
            ProcessSpawnError: If the executable is missing or cannot be run
        """
        if stdio not in STDIO_MODES:
            raise ValueError("Invalid stdio mode '{}'. Valid modes: {}".format(stdio, list(STDIO_MODES)))

        path = self._find_executable(executable)

        cmd = [path] + list(args or [])
        if port_argument:
            cmd.append(port_argument.format(port=port))

        popen_kwargs = {
            'stdin': subprocess.DEVNULL,
            'stdout': STDIO_MODES[stdio],
            'stderr': STDIO_MODES[stdio],
        }
        if env:
            popen_kwargs['env'] = dict(os.environ, **env)

        if IS_WINDOWS:
            # New process group so the driver can be terminated cleanly
            popen_kwargs['creationflags'] = subprocess.CREATE_NEW_PROCESS_GROUP
        elif IS_LINUX:
            popen_kwargs['preexec_fn'] = _set_pdeathsig

        self.log.info("Starting driver with command: {}".format(' '.join(cmd)))

        try:
            popen = subprocess.Popen(cmd, **popen_kwargs)
        except OSError as e:
            raise ProcessSpawnError("Failed to start {}: {}".format(path, e)) from e

        process = DriverProcess(popen, path, port, cmd)
        if stdio == "pipe":
            process.drain_output()
        self.log.debug("Started {}".format(process))
        return process

    def check_alive(self, process: DriverProcess) -> None:
        """
        Raises:
            ProcessExitedError: If the process has already exited
        """
        exit_code = process.returncode
        if exit_code is not None:
            raise ProcessExitedError(exit_code, process.read_output())

    def interrupt(self, process: Optional[DriverProcess]) -> None:
        """
        Send the graceful stop signal without waiting: SIGINT, or terminate()
        on Windows. stop() still has to be called to reap the process.
        """
        if process is None or not process.is_running():
            return
        pid = process.pid
        self.log.info("Shutting down driver process (PID: {})".format(pid))
        try:
            if IS_WINDOWS:
                process.popen.terminate()
            else:
                os.kill(pid, signal.SIGINT)
        except ProcessLookupError:
            self.log.info("Driver process already terminated")
        except OSError as e:
            self.log.warning("Error signalling driver process: {}".format(e))

    def stop(self,
             process: Optional[DriverProcess],
             graceful_timeout: Optional[float] = None,
             kill_timeout: Optional[float] = None) -> None:
        """
        Stop a driver process, escalating from a graceful signal to a kill.

        Stopping None or a process that already exited does nothing, so this
        is safe to call more than once. It blocks for up to
        graceful_timeout + kill_timeout seconds; async callers run it in an
        executor.

        Args:
            process: Handle returned by start()
            graceful_timeout: Overrides the supervisor's graceful_timeout
            kill_timeout: Overrides the supervisor's kill_timeout
        """
        if process is None:
            return
        graceful_timeout = self.graceful_timeout if graceful_timeout is None else graceful_timeout
        kill_timeout = self.kill_timeout if kill_timeout is None else kill_timeout

        if process.is_running():
            self.interrupt(process)
            try:
                process.popen.wait(timeout=graceful_timeout)
                self.log.info("Driver terminated gracefully")
            except subprocess.TimeoutExpired:
                self.log.warning("Driver did not exit after {} seconds, killing...".format(graceful_timeout))
                try:
                    process.popen.kill()
                    process.popen.wait(timeout=kill_timeout)
                    self.log.info("Driver killed forcefully")
                except ProcessLookupError:
                    self.log.info("Driver process already terminated")
                except subprocess.TimeoutExpired:
                    self.log.error("Driver did not terminate even after kill (waited {} seconds)".format(
                        kill_timeout))
        else:
            # Reap it so no zombie is left behind
            process.popen.poll()

        # The readers close the pipes once they reach end of output
        process.join_readers()


def _set_pdeathsig():
    """Make the driver die with its parent (Linux only, run as preexec_fn)."""
    try:
        import ctypes
        PR_SET_PDEATHSIG = 1
        libc = ctypes.CDLL("libc.so.6")
        libc.prctl(PR_SET_PDEATHSIG, signal.SIGTERM)
    except OSError:
        pass
