#!/usr/bin/env python3

"""
WebDriverController Exceptions

This module contains all custom exceptions for WebDriverController.
"""


class WebDriverControllerException(Exception):
    """Base exception for WebDriverController errors"""
    pass


class ProcessSpawnError(WebDriverControllerException):
    """Exception raised when the driver executable cannot be started"""
    pass


class ProcessExitedError(WebDriverControllerException):
    """Exception raised when the driver process exits before a session exists"""

    def __init__(self, exit_code, output=""):
        self.exit_code = exit_code
        self.output = output
        msg = "Driver process exited with code {}".format(exit_code)
        if output:
            msg += ": {}".format(output)
        super().__init__(msg)


class SessionCreationError(WebDriverControllerException):
    """
    Exception raised when a new session cannot be negotiated.

    `reason` is either REASON_STARTUP_TIMEOUT (the endpoint never accepted a
    connection in time) or REASON_REJECTED (the server answered with a
    WebDriver error, whose `code` and `message` are kept verbatim).
    """

    REASON_STARTUP_TIMEOUT = "startup timeout"
    REASON_REJECTED = "rejected"

    def __init__(self, reason, code=None, message=None):
        self.reason = reason
        self.code = code
        self.message = message
        if code is not None:
            text = "Session creation failed ({}): {}: {}".format(reason, code, message)
        else:
            text = "Session creation failed ({})".format(reason)
            if message:
                text += ": {}".format(message)
        super().__init__(text)


class TransportError(WebDriverControllerException):
    """Exception raised when the HTTP connection to the driver fails"""
    pass


class CommandError(WebDriverControllerException):
    """Exception raised when the driver reports a WebDriver error for a command"""

    def __init__(self, code, message="", stacktrace="", status=None):
        self.code = code
        self.message = message
        self.stacktrace = stacktrace
        self.status = status
        super().__init__("{}: {}".format(code, message))


class ProtocolViolationError(WebDriverControllerException):
    """Exception raised when a response does not have the expected shape"""
    pass


class DuplicateDeviceError(WebDriverControllerException):
    """Exception raised when an input device name is reused with another type"""
    pass


class SessionStateError(WebDriverControllerException):
    """Exception raised when the session lifecycle is used out of order"""
    pass
