#!/usr/bin/env python3

"""
WebDriver Wire Types and Validation

This module provides the value types of the W3C WebDriver protocol
(https://www.w3.org/TR/webdriver2/) together with the validation helpers used
when building requests and decoding responses.
"""

import base64
from typing import Any, Dict, Mapping, Optional
from enum import Enum

from .exceptions import ProtocolViolationError


# Key used by the protocol to mark a JSON object as a web element reference
ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"


class WireTypeError(TypeError):
    """Custom exception for WebDriver wire type errors"""
    pass


class WireValidationError(ValueError):
    """Custom exception for WebDriver wire validation errors"""
    pass


class ResultShape(Enum):
    """Expected shape of the `value` field of a command response"""
    ANY = "any"
    NULL = "null"
    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    OBJECT = "object"
    LIST = "list"
    ELEMENT = "element"
    ELEMENTS = "elements"
    BASE64 = "base64"
    SESSION = "session"


class ErrorCode(Enum):
    """Error codes as defined by the W3C WebDriver standard"""
    ELEMENT_CLICK_INTERCEPTED = "element click intercepted"
    ELEMENT_NOT_INTERACTABLE = "element not interactable"
    INSECURE_CERTIFICATE = "insecure certificate"
    INVALID_ARGUMENT = "invalid argument"
    INVALID_COOKIE_DOMAIN = "invalid cookie domain"
    INVALID_ELEMENT_STATE = "invalid element state"
    INVALID_SELECTOR = "invalid selector"
    INVALID_SESSION_ID = "invalid session id"
    JAVASCRIPT_ERROR = "javascript error"
    MOVE_TARGET_OUT_OF_BOUNDS = "move target out of bounds"
    NO_SUCH_ALERT = "no such alert"
    NO_SUCH_COOKIE = "no such cookie"
    NO_SUCH_ELEMENT = "no such element"
    NO_SUCH_FRAME = "no such frame"
    NO_SUCH_WINDOW = "no such window"
    NO_SUCH_SHADOW_ROOT = "no such shadow root"
    SCRIPT_TIMEOUT = "script timeout"
    SESSION_NOT_CREATED = "session not created"
    STALE_ELEMENT_REFERENCE = "stale element reference"
    DETACHED_SHADOW_ROOT = "detached shadow root"
    TIMEOUT = "timeout"
    UNABLE_TO_SET_COOKIE = "unable to set cookie"
    UNABLE_TO_CAPTURE_SCREEN = "unable to capture screen"
    UNEXPECTED_ALERT_OPEN = "unexpected alert open"
    UNKNOWN_COMMAND = "unknown command"
    UNKNOWN_ERROR = "unknown error"
    UNKNOWN_METHOD = "unknown method"
    UNSUPPORTED_OPERATION = "unsupported operation"


class LocatorStrategy(Enum):
    """Element location strategies as defined by the W3C WebDriver standard"""
    CSS_SELECTOR = "css selector"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    TAG_NAME = "tag name"
    XPATH = "xpath"


class PointerType(Enum):
    """Pointer input source subtypes"""
    MOUSE = "mouse"
    PEN = "pen"
    TOUCH = "touch"


# Action subtypes accepted by each input source type
ACTION_TYPES = {
    "none": ("pause",),
    "key": ("pause", "keyDown", "keyUp"),
    "pointer": ("pause", "pointerDown", "pointerUp", "pointerMove", "pointerCancel"),
    "wheel": ("pause", "scroll"),
}


def element_reference(element_id: str) -> Dict[str, str]:
    """Wrap an element id into the JSON object the protocol expects"""
    return {ELEMENT_KEY: element_id}


def is_element_reference(value: Any) -> bool:
    return isinstance(value, dict) and ELEMENT_KEY in value


def validate_locator_strategy(strategy: str) -> str:
    """
    Validate an element location strategy.

    Args:
        strategy: The strategy to validate

    Returns:
        Validated strategy

    Raises:
        WireTypeError: If the strategy is invalid
    """
    try:
        return LocatorStrategy(strategy).value
    except ValueError:
        valid = [s.value for s in LocatorStrategy]
        raise WireTypeError("Invalid locator strategy '{}'. Valid strategies: {}".format(strategy, valid))


def validate_pointer_type(pointer_type: str) -> str:
    """
    Validate a pointer subtype.

    Raises:
        WireTypeError: If the pointer type is invalid
    """
    try:
        return PointerType(pointer_type).value
    except ValueError:
        valid = [p.value for p in PointerType]
        raise WireTypeError("Invalid pointer type '{}'. Valid types: {}".format(pointer_type, valid))


def validate_action(device_type: str, action: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check that an action object is structurally usable by a device.

    Only the shape is checked (a mapping with a `type` the device kind
    accepts). Sequencing, such as a keyUp without a matching keyDown, is left
    to the remote end.

    Args:
        device_type: Input source type ('key', 'pointer', 'wheel', 'none')
        action: Action object

    Returns:
        The action as a plain dict

    Raises:
        WireValidationError: If the action cannot belong to the device
    """
    if not isinstance(action, Mapping):
        raise WireValidationError("Action must be a mapping, got {}".format(type(action).__name__))
    if "type" not in action:
        raise WireValidationError("Action is missing required field 'type'")

    allowed = ACTION_TYPES.get(device_type)
    if allowed is None:
        raise WireValidationError("Unknown input source type: {}".format(device_type))
    if action["type"] not in allowed:
        raise WireValidationError("Action type '{}' is not valid for a {} device. Valid types: {}".format(
            action["type"], device_type, list(allowed)))
    return dict(action)


def validate_duration(duration: Optional[int]) -> Optional[int]:
    if duration is None:
        return None
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        raise WireValidationError("Duration must be a non-negative integer (milliseconds)")
    return duration


def validate_cookie(cookie: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a cookie dictionary according to the WebDriver specification.

    Raises:
        WireValidationError: If the cookie is invalid
    """
    if not isinstance(cookie, dict):
        raise WireValidationError("Cookie must be a dictionary")

    for field in ('name', 'value'):
        if field not in cookie:
            raise WireValidationError("Cookie missing required field: {}".format(field))
        if not isinstance(cookie[field], str):
            raise WireValidationError("Cookie field '{}' must be a string".format(field))

    optional_fields = {
        'domain': str,
        'path': str,
        'secure': bool,
        'httpOnly': bool,
        'sameSite': str,
        'expiry': int
    }
    for field, expected_type in optional_fields.items():
        if field in cookie and not isinstance(cookie[field], expected_type):
            raise WireValidationError("Cookie field '{}' must be {}".format(field, expected_type.__name__))

    if cookie.get('sameSite') not in (None, 'Lax', 'Strict', 'None'):
        raise WireValidationError("Invalid sameSite value: {}".format(cookie['sameSite']))

    return cookie


def _element_id(value: Any, command_name: str) -> str:
    if not is_element_reference(value):
        raise ProtocolViolationError("{}: expected a web element reference, got {!r}".format(command_name, value))
    return value[ELEMENT_KEY]


def decode_result(value: Any, shape: ResultShape, command_name: str = "command") -> Any:
    """
    Validate the `value` of a response against the shape a command declares.

    Element references are unwrapped into their ids and base64 payloads
    (screenshots) into bytes; every other shape is returned unchanged.

    Args:
        value: The `value` field of a successful response
        shape: Expected result shape
        command_name: Used in error messages

    Returns:
        Decoded value

    Raises:
        ProtocolViolationError: If the value does not match the shape
    """
    def mismatch(expected):
        return ProtocolViolationError("{}: expected {} result, got {!r}".format(command_name, expected, value))

    if shape is ResultShape.ANY:
        return value
    if shape is ResultShape.NULL:
        if value is not None:
            raise mismatch("null")
        return None
    if shape is ResultShape.BOOLEAN:
        if not isinstance(value, bool):
            raise mismatch("boolean")
        return value
    if shape is ResultShape.STRING:
        if not isinstance(value, str):
            raise mismatch("string")
        return value
    if shape is ResultShape.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise mismatch("number")
        return value
    if shape is ResultShape.OBJECT:
        if not isinstance(value, dict):
            raise mismatch("object")
        return value
    if shape is ResultShape.LIST:
        if not isinstance(value, list):
            raise mismatch("list")
        return value
    if shape is ResultShape.ELEMENT:
        return _element_id(value, command_name)
    if shape is ResultShape.ELEMENTS:
        if not isinstance(value, list):
            raise mismatch("element list")
        return [_element_id(item, command_name) for item in value]
    if shape is ResultShape.BASE64:
        if not isinstance(value, str):
            raise mismatch("base64 string")
        try:
            return base64.b64decode(value, validate=True)
        except (ValueError, TypeError) as e:
            raise ProtocolViolationError("{}: invalid base64 payload: {}".format(command_name, e)) from e
    if shape is ResultShape.SESSION:
        if not isinstance(value, dict) or not isinstance(value.get("sessionId"), str):
            raise mismatch("session")
        return value
    raise WireTypeError("Unknown result shape: {!r}".format(shape))


def parse_error_body(body: Any) -> Optional[Dict[str, Any]]:
    """
    Extract the WebDriver error object from a decoded response body.

    Returns:
        Dict with 'error', 'message', 'stacktrace' and 'data', or None if the
        body is not a WebDriver error body
    """
    if not isinstance(body, dict):
        return None
    value = body.get("value")
    if not isinstance(value, dict) or not isinstance(value.get("error"), str):
        return None
    return {
        "error": value["error"],
        "message": value.get("message", ""),
        "stacktrace": value.get("stacktrace", ""),
        "data": value.get("data"),
    }
