#!/usr/bin/env python3

"""
WebDriverController Main Interface

This module provides the high-level interface: pick a browser, get a session
on a freshly started (or remote) driver, and run WebDriver commands on it.
"""

import logging
from typing import Dict, List, Mapping, Optional

import httpx

from .browsers import default_executable, get_variant
from .capabilities import CapabilityConfigurator
from .execution_manager import ProcessOptions, ProcessSupervisor
from .session import Session, SessionClient
from .webdriver_mixin import WebDriverCommandsMixin


class WebDriverRemoteInterface(WebDriverCommandsMixin, SessionClient):
    """
    High-level interface for one browser session.

    Example:
        async with WebDriverRemoteInterface(browser="firefox", headless=True) as driver:
            await driver.navigate("https://example.org")
            title = await driver.get_title()
    """

    def __init__(self,
                 browser: str = "firefox",
                 executable: Optional[str] = None,
                 port: Optional[int] = None,
                 host: str = "127.0.0.1",
                 endpoint: Optional[str] = None,
                 headless: bool = False,
                 always_match: Optional[Mapping] = None,
                 first_match: Optional[List[Mapping]] = None,
                 root: Optional[Mapping] = None,
                 specific: Optional[Mapping] = None,
                 driver_args: List[str] = None,
                 env: Dict[str, str] = None,
                 stdio: str = "ignore",
                 startup_timeout: float = 20.0,
                 request_timeout: float = 60.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 supervisor: Optional[ProcessSupervisor] = None):
        """
        Initialize the interface. Nothing is started until new_session() or
        `async with`.

        Args:
            browser: Browser variant ('firefox', 'chrome', 'remote')
            executable: Driver executable (defaults to the variant's driver)
            port: Driver port (None for automatic selection)
            host: Host the local driver is reached on
            endpoint: URL of an already running driver; nothing is spawned
            headless: Add the variant's headless browser arguments
            always_match: Initial alwaysMatch capabilities
            first_match: Initial firstMatch list
            root: Extra keys for the new-session payload root
            specific: Browser specific options, placed under the vendor key
            driver_args: Extra command line arguments for the driver
            env: Extra environment variables for the driver
            stdio: Driver output handling: 'inherit', 'ignore' or 'pipe'
            startup_timeout: Seconds to wait for the driver to accept a session
            request_timeout: Timeout in seconds for each command
            transport: Custom httpx transport
            supervisor: Custom process supervisor
        """
        super().__init__(supervisor=supervisor, transport=transport, request_timeout=request_timeout)

        self.variant = get_variant(browser)
        self.configurator = CapabilityConfigurator.for_variant(
            self.variant,
            always_match=always_match,
            first_match=first_match,
            root=root,
            specific=specific,
            headless=headless,
        )
        self.process_options = ProcessOptions(
            executable=executable or default_executable(self.variant),
            port=port,
            host=host,
            args=driver_args,
            env=env,
            stdio=stdio,
            port_argument=self.variant.port_argument,
            endpoint=endpoint,
            startup_timeout=startup_timeout,
        )
        self.log = logging.getLogger("WebDriverController.RemoteInterface")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def start(self) -> Session:
        """Start the driver (if local) and create the session from the configured capabilities"""
        self.log.debug("Starting {} session".format(self.variant.name))
        return await self.new_session(self.configurator.get_capability_set(), self.process_options)

    @property
    def port(self) -> Optional[int]:
        """Port of the local driver process, None when not running or remote"""
        if self.session is None or self.session.process is None:
            return None
        return self.session.process.port

    @property
    def endpoint(self) -> Optional[str]:
        return self.session.endpoint if self.session else None

    async def navigate_and_get_source(self, url: str) -> str:
        """Navigate to a URL and return the resulting page source"""
        await self.navigate(url)
        return await self.get_page_source()

    async def get_page_url_title(self) -> tuple:
        """Get (title, url) of the current page"""
        return await self.get_title(), await self.get_current_url()

    def __repr__(self):
        return "<WebDriverRemoteInterface {} session={}>".format(self.variant.name, self.session_id)
