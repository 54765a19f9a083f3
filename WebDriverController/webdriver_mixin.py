#!/usr/bin/env python3

"""
WebDriver Commands Mixin for WebDriverController

This module provides a mixin class exposing the W3C WebDriver commands as
coroutines. It expects to be combined with SessionClient, whose dispatch()
does the actual work. https://www.w3.org/TR/webdriver2/
"""

from typing import Any, Dict, List, Optional, Union

from . import commands
from .actions import ActionsBuilder
from .wire_types import element_reference, is_element_reference, validate_cookie, validate_locator_strategy


class WebDriverCommandsMixin:
    """
    Mixin class that provides WebDriver commands.

    Element commands take and return element ids (strings); they are wrapped
    into element references on the way out.
    """

    # ========================================================================
    # Session Commands
    # ========================================================================

    async def status(self) -> Dict[str, Any]:
        """Readiness state of the remote end ({'ready': bool, 'message': str})"""
        return await self.dispatch(commands.STATUS)

    async def get_timeouts(self) -> Dict[str, Any]:
        return await self.dispatch(commands.GET_TIMEOUTS)

    async def set_timeouts(self, implicit: Optional[int] = None, page_load: Optional[int] = None,
                           script: Optional[int] = None) -> None:
        """
        Set session timeouts, in milliseconds. Only given values are sent.
        """
        body = {}
        if implicit is not None:
            body["implicit"] = implicit
        if page_load is not None:
            body["pageLoad"] = page_load
        if script is not None:
            body["script"] = script
        await self.dispatch(commands.SET_TIMEOUTS, body=body)

    # ========================================================================
    # Navigation Commands
    # ========================================================================

    async def navigate(self, url: str) -> None:
        """
        Navigate the current top-level browsing context to a URL.

        Returns once the page load strategy of the session is satisfied.
        """
        await self.dispatch(commands.NAVIGATE_TO, body={"url": url})

    async def get_current_url(self) -> str:
        return await self.dispatch(commands.GET_CURRENT_URL)

    async def back(self) -> None:
        await self.dispatch(commands.BACK)

    async def forward(self) -> None:
        await self.dispatch(commands.FORWARD)

    async def refresh(self) -> None:
        await self.dispatch(commands.REFRESH)

    async def get_title(self) -> str:
        return await self.dispatch(commands.GET_TITLE)

    async def get_page_source(self) -> str:
        return await self.dispatch(commands.GET_PAGE_SOURCE)

    # ========================================================================
    # Window Commands
    # ========================================================================

    async def get_window_handle(self) -> str:
        return await self.dispatch(commands.GET_WINDOW_HANDLE)

    async def get_window_handles(self) -> List[str]:
        return await self.dispatch(commands.GET_WINDOW_HANDLES)

    async def new_window(self, type: str = "tab") -> Dict[str, Any]:
        """
        Open a new tab or window.

        Returns:
            {'handle': str, 'type': 'tab' | 'window'}
        """
        return await self.dispatch(commands.NEW_WINDOW, body={"type": type})

    async def switch_to_window(self, handle: str) -> None:
        await self.dispatch(commands.SWITCH_TO_WINDOW, body={"handle": handle})

    async def close_window(self) -> List[str]:
        """Close the current window; returns the remaining handles"""
        return await self.dispatch(commands.CLOSE_WINDOW)

    async def get_window_rect(self) -> Dict[str, int]:
        return await self.dispatch(commands.GET_WINDOW_RECT)

    async def set_window_rect(self, x: int = None, y: int = None, width: int = None,
                              height: int = None) -> Dict[str, int]:
        body = {key: value for key, value in (("x", x), ("y", y), ("width", width), ("height", height))
                if value is not None}
        return await self.dispatch(commands.SET_WINDOW_RECT, body=body)

    async def maximize_window(self) -> Dict[str, int]:
        return await self.dispatch(commands.MAXIMIZE_WINDOW)

    async def switch_to_frame(self, frame: Union[None, int, str]) -> None:
        """
        Switch to a frame by index, by element id, or back to the top with None.
        """
        if isinstance(frame, str):
            frame = element_reference(frame)
        await self.dispatch(commands.SWITCH_TO_FRAME, body={"id": frame})

    async def switch_to_parent_frame(self) -> None:
        await self.dispatch(commands.SWITCH_TO_PARENT_FRAME)

    # ========================================================================
    # Element Commands
    # ========================================================================

    async def find_element(self, value: str, using: str = "css selector",
                           from_element: Optional[str] = None) -> str:
        """
        Find the first element matching a locator.

        Args:
            value: Selector
            using: Location strategy ('css selector', 'xpath', 'link text', ...)
            from_element: Search below this element id instead of the document

        Returns:
            Element id

        Raises:
            CommandError: With code 'no such element' if nothing matches
        """
        body = {"using": validate_locator_strategy(using), "value": value}
        if from_element:
            return await self.dispatch(commands.FIND_ELEMENT_FROM_ELEMENT, {"elementId": from_element}, body)
        return await self.dispatch(commands.FIND_ELEMENT, body=body)

    async def find_elements(self, value: str, using: str = "css selector",
                            from_element: Optional[str] = None) -> List[str]:
        body = {"using": validate_locator_strategy(using), "value": value}
        if from_element:
            return await self.dispatch(commands.FIND_ELEMENTS_FROM_ELEMENT, {"elementId": from_element}, body)
        return await self.dispatch(commands.FIND_ELEMENTS, body=body)

    async def get_active_element(self) -> str:
        return await self.dispatch(commands.GET_ACTIVE_ELEMENT)

    async def is_element_selected(self, element_id: str) -> bool:
        return await self.dispatch(commands.IS_ELEMENT_SELECTED, {"elementId": element_id})

    async def is_element_enabled(self, element_id: str) -> bool:
        return await self.dispatch(commands.IS_ELEMENT_ENABLED, {"elementId": element_id})

    async def get_element_attribute(self, element_id: str, name: str) -> Optional[str]:
        return await self.dispatch(commands.GET_ELEMENT_ATTRIBUTE, {"elementId": element_id, "name": name})

    async def get_element_property(self, element_id: str, name: str) -> Any:
        return await self.dispatch(commands.GET_ELEMENT_PROPERTY, {"elementId": element_id, "name": name})

    async def get_element_css_value(self, element_id: str, property_name: str) -> str:
        return await self.dispatch(commands.GET_ELEMENT_CSS_VALUE,
                                   {"elementId": element_id, "propertyName": property_name})

    async def get_element_text(self, element_id: str) -> str:
        return await self.dispatch(commands.GET_ELEMENT_TEXT, {"elementId": element_id})

    async def get_element_tag_name(self, element_id: str) -> str:
        return await self.dispatch(commands.GET_ELEMENT_TAG_NAME, {"elementId": element_id})

    async def get_element_rect(self, element_id: str) -> Dict[str, float]:
        return await self.dispatch(commands.GET_ELEMENT_RECT, {"elementId": element_id})

    async def element_click(self, element_id: str) -> None:
        await self.dispatch(commands.ELEMENT_CLICK, {"elementId": element_id})

    async def element_clear(self, element_id: str) -> None:
        await self.dispatch(commands.ELEMENT_CLEAR, {"elementId": element_id})

    async def element_send_keys(self, element_id: str, text: str) -> None:
        await self.dispatch(commands.ELEMENT_SEND_KEYS, {"elementId": element_id}, {"text": text})

    # ========================================================================
    # Script Commands
    # ========================================================================

    async def execute_script(self, script: str, args: List[Any] = None) -> Any:
        """
        Run a function body synchronously in the page.

        Args:
            script: Function body, e.g. 'return document.title'
            args: Arguments available as `arguments[i]`

        Returns:
            The script's return value; element references come back as element ids
        """
        result = await self.dispatch(commands.EXECUTE_SCRIPT, body={"script": script, "args": list(args or [])})
        return _unwrap_elements(result)

    async def execute_async_script(self, script: str, args: List[Any] = None) -> Any:
        """Like execute_script, but the result is passed to the last argument callback"""
        result = await self.dispatch(commands.EXECUTE_ASYNC_SCRIPT,
                                     body={"script": script, "args": list(args or [])})
        return _unwrap_elements(result)

    # ========================================================================
    # Cookie Commands
    # ========================================================================

    async def get_cookies(self) -> List[Dict[str, Any]]:
        return await self.dispatch(commands.GET_ALL_COOKIES)

    async def get_cookie(self, name: str) -> Dict[str, Any]:
        return await self.dispatch(commands.GET_NAMED_COOKIE, {"name": name})

    async def add_cookie(self, cookie: Dict[str, Any]) -> None:
        await self.dispatch(commands.ADD_COOKIE, body={"cookie": validate_cookie(cookie)})

    async def delete_cookie(self, name: str) -> None:
        await self.dispatch(commands.DELETE_COOKIE, {"name": name})

    async def delete_all_cookies(self) -> None:
        await self.dispatch(commands.DELETE_ALL_COOKIES)

    # ========================================================================
    # Input Commands
    # ========================================================================

    async def perform_actions(self, actions: Union[ActionsBuilder, Dict[str, Any]]) -> None:
        """
        Perform input actions.

        Args:
            actions: An ActionsBuilder, or a body already built by one
        """
        if isinstance(actions, ActionsBuilder):
            actions = actions.build()
        await self.dispatch(commands.PERFORM_ACTIONS, body=actions)

    async def release_actions(self) -> None:
        """Release all keys and pointer buttons held by previous actions"""
        await self.dispatch(commands.RELEASE_ACTIONS)

    # ========================================================================
    # Alert Commands
    # ========================================================================

    async def dismiss_alert(self) -> None:
        await self.dispatch(commands.DISMISS_ALERT)

    async def accept_alert(self) -> None:
        await self.dispatch(commands.ACCEPT_ALERT)

    async def get_alert_text(self) -> Optional[str]:
        return await self.dispatch(commands.GET_ALERT_TEXT)

    async def send_alert_text(self, text: str) -> None:
        await self.dispatch(commands.SEND_ALERT_TEXT, body={"text": text})

    # ========================================================================
    # Screen Capture Commands
    # ========================================================================

    async def take_screenshot(self, element_id: Optional[str] = None) -> bytes:
        """
        Capture a PNG screenshot of the viewport, or of one element.

        Returns:
            PNG data
        """
        if element_id:
            return await self.dispatch(commands.TAKE_ELEMENT_SCREENSHOT, {"elementId": element_id})
        return await self.dispatch(commands.TAKE_SCREENSHOT)

    async def print_page(self, orientation: str = "portrait", scale: float = 1.0,
                         background: bool = False) -> bytes:
        """
        Render the page as PDF.

        Returns:
            PDF data
        """
        return await self.dispatch(commands.PRINT_PAGE, body={
            "orientation": orientation,
            "scale": scale,
            "background": background,
        })


def _unwrap_elements(value: Any) -> Any:
    if is_element_reference(value):
        return next(iter(value.values()))
    if isinstance(value, list):
        return [_unwrap_elements(item) for item in value]
    if isinstance(value, dict):
        return {key: _unwrap_elements(item) for key, item in value.items()}
    return value
