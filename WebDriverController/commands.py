#!/usr/bin/env python3

"""
WebDriver command catalog

Each command is a stateless template: HTTP method, path (with `str.format`
fields such as `{sessionId}`), default body and the shape of the value the
remote end answers with. SessionClient.dispatch() fills in the path and sends
it.
"""

from collections import namedtuple

from .wire_types import ResultShape


class Command(namedtuple("Command", ["name", "method", "path", "body", "result"])):
    """A WebDriver endpoint description"""

    __slots__ = ()

    def __new__(cls, name, method, path, body=None, result=ResultShape.ANY):
        return super().__new__(cls, name, method.upper(), path, body, result)

    @property
    def needs_session(self) -> bool:
        return "{sessionId}" in self.path


NEW_SESSION = Command("newSession", "POST", "/session", result=ResultShape.SESSION)
DELETE_SESSION = Command("deleteSession", "DELETE", "/session/{sessionId}", result=ResultShape.NULL)
STATUS = Command("status", "GET", "/status", result=ResultShape.OBJECT)

GET_TIMEOUTS = Command("getTimeouts", "GET", "/session/{sessionId}/timeouts", result=ResultShape.OBJECT)
SET_TIMEOUTS = Command("setTimeouts", "POST", "/session/{sessionId}/timeouts", result=ResultShape.NULL)

NAVIGATE_TO = Command("navigateTo", "POST", "/session/{sessionId}/url", result=ResultShape.NULL)
GET_CURRENT_URL = Command("getCurrentUrl", "GET", "/session/{sessionId}/url", result=ResultShape.STRING)
BACK = Command("back", "POST", "/session/{sessionId}/back", result=ResultShape.NULL)
FORWARD = Command("forward", "POST", "/session/{sessionId}/forward", result=ResultShape.NULL)
REFRESH = Command("refresh", "POST", "/session/{sessionId}/refresh", result=ResultShape.NULL)
GET_TITLE = Command("getTitle", "GET", "/session/{sessionId}/title", result=ResultShape.STRING)

GET_WINDOW_HANDLE = Command("getWindowHandle", "GET", "/session/{sessionId}/window", result=ResultShape.STRING)
CLOSE_WINDOW = Command("closeWindow", "DELETE", "/session/{sessionId}/window", result=ResultShape.LIST)
SWITCH_TO_WINDOW = Command("switchToWindow", "POST", "/session/{sessionId}/window", result=ResultShape.NULL)
GET_WINDOW_HANDLES = Command("getWindowHandles", "GET", "/session/{sessionId}/window/handles",
                             result=ResultShape.LIST)
NEW_WINDOW = Command("newWindow", "POST", "/session/{sessionId}/window/new", body={"type": "tab"},
                     result=ResultShape.OBJECT)
GET_WINDOW_RECT = Command("getWindowRect", "GET", "/session/{sessionId}/window/rect", result=ResultShape.OBJECT)
SET_WINDOW_RECT = Command("setWindowRect", "POST", "/session/{sessionId}/window/rect", result=ResultShape.OBJECT)
MAXIMIZE_WINDOW = Command("maximizeWindow", "POST", "/session/{sessionId}/window/maximize",
                          result=ResultShape.OBJECT)
SWITCH_TO_FRAME = Command("switchToFrame", "POST", "/session/{sessionId}/frame", result=ResultShape.NULL)
SWITCH_TO_PARENT_FRAME = Command("switchToParentFrame", "POST", "/session/{sessionId}/frame/parent",
                                 result=ResultShape.NULL)

FIND_ELEMENT = Command("findElement", "POST", "/session/{sessionId}/element", result=ResultShape.ELEMENT)
FIND_ELEMENTS = Command("findElements", "POST", "/session/{sessionId}/elements", result=ResultShape.ELEMENTS)
FIND_ELEMENT_FROM_ELEMENT = Command("findElementFromElement", "POST",
                                    "/session/{sessionId}/element/{elementId}/element",
                                    result=ResultShape.ELEMENT)
FIND_ELEMENTS_FROM_ELEMENT = Command("findElementsFromElement", "POST",
                                     "/session/{sessionId}/element/{elementId}/elements",
                                     result=ResultShape.ELEMENTS)
GET_ACTIVE_ELEMENT = Command("getActiveElement", "GET", "/session/{sessionId}/element/active",
                             result=ResultShape.ELEMENT)

IS_ELEMENT_SELECTED = Command("isElementSelected", "GET", "/session/{sessionId}/element/{elementId}/selected",
                              result=ResultShape.BOOLEAN)
IS_ELEMENT_ENABLED = Command("isElementEnabled", "GET", "/session/{sessionId}/element/{elementId}/enabled",
                             result=ResultShape.BOOLEAN)
GET_ELEMENT_ATTRIBUTE = Command("getElementAttribute", "GET",
                                "/session/{sessionId}/element/{elementId}/attribute/{name}")
GET_ELEMENT_PROPERTY = Command("getElementProperty", "GET",
                               "/session/{sessionId}/element/{elementId}/property/{name}")
GET_ELEMENT_CSS_VALUE = Command("getElementCssValue", "GET",
                                "/session/{sessionId}/element/{elementId}/css/{propertyName}",
                                result=ResultShape.STRING)
GET_ELEMENT_TEXT = Command("getElementText", "GET", "/session/{sessionId}/element/{elementId}/text",
                           result=ResultShape.STRING)
GET_ELEMENT_TAG_NAME = Command("getElementTagName", "GET", "/session/{sessionId}/element/{elementId}/name",
                               result=ResultShape.STRING)
GET_ELEMENT_RECT = Command("getElementRect", "GET", "/session/{sessionId}/element/{elementId}/rect",
                           result=ResultShape.OBJECT)
ELEMENT_CLICK = Command("elementClick", "POST", "/session/{sessionId}/element/{elementId}/click",
                        result=ResultShape.NULL)
ELEMENT_CLEAR = Command("elementClear", "POST", "/session/{sessionId}/element/{elementId}/clear",
                        result=ResultShape.NULL)
ELEMENT_SEND_KEYS = Command("elementSendKeys", "POST", "/session/{sessionId}/element/{elementId}/value",
                            result=ResultShape.NULL)

GET_PAGE_SOURCE = Command("getPageSource", "GET", "/session/{sessionId}/source", result=ResultShape.STRING)
EXECUTE_SCRIPT = Command("executeScript", "POST", "/session/{sessionId}/execute/sync",
                         body={"args": []})
EXECUTE_ASYNC_SCRIPT = Command("executeAsyncScript", "POST", "/session/{sessionId}/execute/async",
                               body={"args": []})

GET_ALL_COOKIES = Command("getAllCookies", "GET", "/session/{sessionId}/cookie", result=ResultShape.LIST)
GET_NAMED_COOKIE = Command("getNamedCookie", "GET", "/session/{sessionId}/cookie/{name}",
                           result=ResultShape.OBJECT)
ADD_COOKIE = Command("addCookie", "POST", "/session/{sessionId}/cookie", result=ResultShape.NULL)
DELETE_COOKIE = Command("deleteCookie", "DELETE", "/session/{sessionId}/cookie/{name}", result=ResultShape.NULL)
DELETE_ALL_COOKIES = Command("deleteAllCookies", "DELETE", "/session/{sessionId}/cookie", result=ResultShape.NULL)

PERFORM_ACTIONS = Command("performActions", "POST", "/session/{sessionId}/actions", result=ResultShape.NULL)
RELEASE_ACTIONS = Command("releaseActions", "DELETE", "/session/{sessionId}/actions", result=ResultShape.NULL)

DISMISS_ALERT = Command("dismissAlert", "POST", "/session/{sessionId}/alert/dismiss", result=ResultShape.NULL)
ACCEPT_ALERT = Command("acceptAlert", "POST", "/session/{sessionId}/alert/accept", result=ResultShape.NULL)
GET_ALERT_TEXT = Command("getAlertText", "GET", "/session/{sessionId}/alert/text")
SEND_ALERT_TEXT = Command("sendAlertText", "POST", "/session/{sessionId}/alert/text", result=ResultShape.NULL)

TAKE_SCREENSHOT = Command("takeScreenshot", "GET", "/session/{sessionId}/screenshot", result=ResultShape.BASE64)
TAKE_ELEMENT_SCREENSHOT = Command("takeElementScreenshot", "GET",
                                  "/session/{sessionId}/element/{elementId}/screenshot",
                                  result=ResultShape.BASE64)
PRINT_PAGE = Command("printPage", "POST", "/session/{sessionId}/print", result=ResultShape.BASE64)
