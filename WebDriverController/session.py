#!/usr/bin/env python3

"""
WebDriverController Session Client

This module negotiates a WebDriver session with a driver (spawning it first
when it runs locally) and dispatches protocol commands over that session.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from . import commands
from .commands import Command
from .execution_manager import DriverProcess, ProcessOptions, ProcessSupervisor
from .exceptions import (
    CommandError,
    ProtocolViolationError,
    SessionCreationError,
    SessionStateError,
    TransportError,
)
from .utils import find_available_port
from .wire_types import ResultShape, decode_result, parse_error_body


class Session:
    """A live WebDriver session and the resources it owns"""

    def __init__(self,
                 id: str,
                 requested: Dict[str, Any],
                 capabilities: Dict[str, Any],
                 endpoint: str,
                 process: Optional[DriverProcess] = None):
        self.id = id
        self.requested = requested
        self.capabilities = capabilities
        self.endpoint = endpoint
        self.process = process

    def __repr__(self):
        return "<Session {} at {}>".format(self.id, self.endpoint)


class SessionClient:
    """
    Client for one WebDriver session.

    The session id goes from absent to held (new_session) to absent again
    (close); a client is not reused afterwards.

    Commands on one client must not be dispatched concurrently: the remote
    end handles one command per session at a time and the client does not
    serialize calls for you, so overlapping dispatches from several tasks
    interleave unpredictably.
    """

    def __init__(self,
                 supervisor: Optional[ProcessSupervisor] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 request_timeout: float = 60.0,
                 delete_timeout: float = 5.0,
                 retry_delay: float = 0.1,
                 max_retry_delay: float = 1.0):
        """
        Args:
            supervisor: Process supervisor used for local drivers
            transport: Custom httpx transport (mostly for tests)
            request_timeout: Timeout in seconds for a single command
            delete_timeout: Timeout in seconds for the DELETE sent by close()
            retry_delay: First delay between connection attempts at startup
            max_retry_delay: Upper bound of the startup backoff delay
        """
        self.supervisor = supervisor or ProcessSupervisor()
        self.transport = transport
        self.request_timeout = request_timeout
        self.delete_timeout = delete_timeout
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay

        self.session = None
        self._http = None
        self._closed = False
        self.log = logging.getLogger("WebDriverController.SessionClient")

    @property
    def session_id(self) -> Optional[str]:
        return self.session.id if self.session else None

    @property
    def capabilities(self) -> Dict[str, Any]:
        """Capabilities the remote end matched for the current session"""
        return self.session.capabilities if self.session else {}

    def _make_http_client(self, endpoint: str) -> httpx.AsyncClient:
        kwargs = {
            'base_url': endpoint,
            'timeout': httpx.Timeout(self.request_timeout),
            'headers': {'Content-Type': 'application/json; charset=utf-8', 'Accept': 'application/json'},
        }
        if self.transport is not None:
            kwargs['transport'] = self.transport
        return httpx.AsyncClient(**kwargs)

    async def _close_http(self):
        http, self._http = self._http, None
        if http is not None:
            await http.aclose()

    async def _stop_process(self, process: Optional[DriverProcess]) -> None:
        """Run the blocking ProcessSupervisor.stop in an executor thread"""
        if process is None:
            return
        await asyncio.get_running_loop().run_in_executor(None, self.supervisor.stop, process)

    # ========================================================================
    # Session creation
    # ========================================================================

    async def new_session(self,
                          capability_set: Mapping[str, Any],
                          process_options: Optional[ProcessOptions] = None) -> Session:
        """
        Start the driver (when local) and create a session on it.

        Args:
            capability_set: New-session payload, see CapabilityConfigurator
            process_options: Driver location and launch options

        Returns:
            The new Session

        Raises:
            SessionStateError: If a session is already held or the client was closed
            ProcessSpawnError: If the driver executable cannot be started
            ProcessExitedError: If the driver exits before the session exists
            SessionCreationError: On startup timeout or server rejection
            TransportError: On a connection failure other than "not listening yet"
            ProtocolViolationError: If the response carries no session id
        """
        if self._closed:
            raise SessionStateError("This client has been closed; create a new one")
        if self.session is not None:
            raise SessionStateError("A session is already active: {}".format(self.session.id))

        options = process_options or ProcessOptions()
        process = None
        try:
            if options.is_local:
                port = options.port or find_available_port(host=options.host)
                process = self.supervisor.start(
                    options.executable,
                    port=port,
                    args=options.args,
                    env=options.env,
                    stdio=options.stdio,
                    port_argument=options.port_argument,
                )
                endpoint = "http://{}:{}".format(options.host, port)
            else:
                endpoint = options.endpoint

            self._http = self._make_http_client(endpoint)
            value = await self._negotiate(capability_set, options, process)

        except BaseException:
            # Covers cancellation too: the driver must not outlive a failed start.
            # The signal is sent before the first await.
            self.supervisor.interrupt(process)
            try:
                await self._stop_process(process)
            finally:
                await self._close_http()
            raise

        self.session = Session(
            id=value["sessionId"],
            requested=dict(capability_set),
            capabilities=value.get("capabilities") or {},
            endpoint=endpoint,
            process=process,
        )
        self.log.info("Created WebDriver session: {}".format(self.session.id))
        return self.session

    async def _negotiate(self,
                         capability_set: Mapping[str, Any],
                         options: ProcessOptions,
                         process: Optional[DriverProcess]) -> Dict[str, Any]:
        """POST /session, retrying while the driver is not accepting connections yet"""
        deadline = time.monotonic() + options.startup_timeout
        delay = self.retry_delay
        attempt = 0

        while True:
            attempt += 1
            if process is not None:
                self.supervisor.check_alive(process)

            # An unanswered connection attempt must not outlast the startup deadline
            connect_timeout = max(deadline - time.monotonic(), 0.01)
            try:
                self.log.debug("Requesting new session (attempt {}) at {}".format(attempt, self._http.base_url))
                response = await self._http.request(
                    commands.NEW_SESSION.method,
                    commands.NEW_SESSION.path,
                    content=json.dumps(capability_set),
                    timeout=httpx.Timeout(self.request_timeout, connect=connect_timeout),
                )
                break
            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self.log.error("Driver did not accept connections within {} seconds".format(
                        options.startup_timeout))
                    raise SessionCreationError(
                        SessionCreationError.REASON_STARTUP_TIMEOUT,
                        message="no connection after {} attempts: {}".format(attempt, e)) from e
                self.log.debug("Connection attempt {} failed: {}. Retrying in {:.2f}s...".format(
                    attempt, e, min(delay, remaining)))
                await asyncio.sleep(min(delay, remaining))
                delay = min(delay * 2, self.max_retry_delay)
            except httpx.TransportError as e:
                raise TransportError("Failed to send new session request: {}".format(e)) from e

        body = self._decode_body(response, commands.NEW_SESSION)

        if not response.is_success:
            error = parse_error_body(body)
            if error is None:
                raise ProtocolViolationError("newSession: HTTP {} without a WebDriver error body".format(
                    response.status_code))
            raise SessionCreationError(SessionCreationError.REASON_REJECTED, error["error"], error["message"])

        value = body.get("value") if isinstance(body, dict) else None
        if isinstance(value, dict) and "sessionId" not in value and isinstance(body.get("sessionId"), str):
            # Pre-W3C drivers put the id next to `value`, which then holds the capabilities
            value = {"sessionId": body["sessionId"], "capabilities": value}
        return decode_result(value, ResultShape.SESSION, commands.NEW_SESSION.name)

    # ========================================================================
    # Command dispatch
    # ========================================================================

    def _format_path(self, command: Command, path_params: Optional[Mapping[str, Any]]) -> str:
        params = dict(path_params or {})
        if command.needs_session and "sessionId" not in params:
            if self.session is None:
                raise SessionStateError("No active session for command {}".format(command.name))
            params["sessionId"] = self.session.id
        quoted = {key: quote(str(value), safe='') for key, value in params.items()}
        try:
            return command.path.format(**quoted)
        except KeyError as e:
            raise ValueError("Missing path parameter {} for command {}".format(e, command.name)) from None

    def _decode_body(self, response: httpx.Response, command: Command) -> Any:
        if not response.content:
            raise ProtocolViolationError("{}: empty response body (HTTP {})".format(
                command.name, response.status_code))
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolViolationError("{}: response is not JSON (HTTP {}): {}".format(
                command.name, response.status_code, e)) from e

    async def dispatch(self,
                       command: Command,
                       path_params: Optional[Mapping[str, Any]] = None,
                       body: Optional[Mapping[str, Any]] = None,
                       timeout: Optional[float] = None) -> Any:
        """
        Send a command and return the decoded `value` of the response.

        Commands are never retried here: most of them are not idempotent
        (a click), so retry policy belongs to the caller.

        Args:
            command: Command template from `commands`
            path_params: Values for the path template (`sessionId` is filled in)
            body: JSON body, merged over the command's default body
            timeout: Request timeout in seconds (defaults to request_timeout)

        Returns:
            The response value, decoded per the command's result shape

        Raises:
            CommandError: If the remote end reports a WebDriver error
            TransportError: If the HTTP connection fails
            ProtocolViolationError: If the response is malformed
            SessionStateError: If the command needs a session and none is held
        """
        path = self._format_path(command, path_params)
        if self._http is None:
            raise SessionStateError("Not connected to a driver")

        request_kwargs = {}
        if command.method == "POST":
            payload = dict(command.body or {})
            payload.update(body or {})
            request_kwargs['content'] = json.dumps(payload)
        if timeout is not None:
            request_kwargs['timeout'] = timeout

        self.log.debug("Sending {} {} {}".format(command.method, path, request_kwargs.get('content', '')))
        try:
            response = await self._http.request(command.method, path, **request_kwargs)
        except httpx.TransportError as e:
            raise TransportError("{} {} failed: {}".format(command.method, path, e)) from e

        self.log.debug("Received HTTP {} for {}: {}".format(response.status_code, command.name, response.text[:500]))
        return self._classify(response, command)

    def _classify(self, response: httpx.Response, command: Command) -> Any:
        body = self._decode_body(response, command)

        if not response.is_success:
            error = parse_error_body(body)
            if error is None:
                raise ProtocolViolationError("{}: HTTP {} without a WebDriver error body".format(
                    command.name, response.status_code))
            raise CommandError(error["error"], error["message"], error["stacktrace"], response.status_code)

        if not isinstance(body, dict) or "value" not in body:
            raise ProtocolViolationError("{}: response has no 'value' field".format(command.name))
        return decode_result(body["value"], command.result, command.name)

    # ========================================================================
    # Teardown
    # ========================================================================

    async def close(self) -> None:
        """
        End the session and stop the driver process.

        The DELETE is best effort (the remote end may already be gone); the
        process is stopped and the state cleared whatever happens to it.
        Closing twice is a no-op.
        """
        session = self.session
        try:
            if session is not None and self._http is not None:
                try:
                    await self.dispatch(commands.DELETE_SESSION, {"sessionId": session.id},
                                        timeout=self.delete_timeout)
                    self.log.info("Deleted WebDriver session: {}".format(session.id))
                except (CommandError, TransportError, ProtocolViolationError) as e:
                    self.log.warning("Failed to delete session {}: {}".format(session.id, e))
        finally:
            if session is not None:
                self._closed = True
            self.session = None
            try:
                if session is not None:
                    self.supervisor.interrupt(session.process)
                    await self._stop_process(session.process)
            finally:
                await self._close_http()
