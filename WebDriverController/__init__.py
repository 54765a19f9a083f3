#!/usr/bin/env python3

"""
WebDriverController - Main package initialization

This package provides a Python client for the W3C WebDriver protocol: it
starts driver executables (geckodriver, chromedriver), negotiates sessions
with them and sends commands over HTTP.
"""

from .interface import WebDriverRemoteInterface
from .session import Session, SessionClient
from .capabilities import CapabilityConfigurator
from .actions import ActionsBuilder
from .browsers import BrowserVariant, get_variant
from .execution_manager import DriverProcess, ProcessOptions, ProcessSupervisor
from .exceptions import (
    WebDriverControllerException,
    ProcessSpawnError,
    ProcessExitedError,
    SessionCreationError,
    TransportError,
    CommandError,
    ProtocolViolationError,
    DuplicateDeviceError,
    SessionStateError
)

__version__ = "0.1.0"

# Main exports
__all__ = [
    'WebDriverRemoteInterface',
    'Session',
    'SessionClient',
    'CapabilityConfigurator',
    'ActionsBuilder',
    'BrowserVariant',
    'get_variant',
    'DriverProcess',
    'ProcessOptions',
    'ProcessSupervisor',
    'WebDriverControllerException',
    'ProcessSpawnError',
    'ProcessExitedError',
    'SessionCreationError',
    'TransportError',
    'CommandError',
    'ProtocolViolationError',
    'DuplicateDeviceError',
    'SessionStateError',
    'setup_logging',
    'main'
]

from .utils import setup_logging, main
