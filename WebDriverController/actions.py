#!/usr/bin/env python3

"""
Input Actions builder

Builds the body of the Perform Actions command. Every input device (input
source) has a list of actions, one per tick; the remote end runs tick N of
all devices together, so at build time every device that takes part is
padded with pauses to the same length.

Example:
    builder = ActionsBuilder()
    builder.keyboard().key_down("\\uE008")
    builder.pointer().pointer_move(10, 20).pointer_down().pointer_up()
    await driver.perform_actions(builder)
"""

import copy
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .exceptions import DuplicateDeviceError
from .wire_types import element_reference, validate_action, validate_duration, validate_pointer_type


class DeviceType(Enum):
    """Input source types"""
    KEY = "key"
    POINTER = "pointer"
    WHEEL = "wheel"
    NONE = "none"


PAUSE = {"type": "pause", "duration": 0}

Origin = Union[str, Dict[str, str]]


def _origin(origin: Origin) -> Origin:
    """'viewport' and 'pointer' pass through; anything else is an element id"""
    if isinstance(origin, dict) or origin in ("viewport", "pointer"):
        return origin
    return element_reference(origin)


class InputDevice:
    """An input source and its tick list"""

    type = None

    def __init__(self, name: str, parameters: Optional[Dict[str, Any]] = None):
        self.name = name
        self.parameters = parameters or {}
        self._actions = []

    @property
    def actions(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._actions)

    def __len__(self):
        return len(self._actions)

    def add_action(self, action: Mapping[str, Any]) -> 'InputDevice':
        """Append one action (one tick) to this device"""
        self._actions.append(copy.deepcopy(validate_action(self.type.value, action)))
        return self

    def pause(self, duration: Optional[int] = None) -> 'InputDevice':
        action = {"type": "pause"}
        if validate_duration(duration) is not None:
            action["duration"] = duration
        return self.add_action(action)

    def serialize(self, ticks: int) -> Dict[str, Any]:
        """Wire form of this device, padded with pauses to `ticks` actions"""
        actions = copy.deepcopy(self._actions)
        actions.extend(dict(PAUSE) for _ in range(ticks - len(actions)))
        result = {"type": self.type.value, "id": self.name}
        if self.parameters:
            result["parameters"] = dict(self.parameters)
        result["actions"] = actions
        return result


class NullInputDevice(InputDevice):
    type = DeviceType.NONE


class KeyInputDevice(InputDevice):
    type = DeviceType.KEY

    def key_down(self, value: str) -> 'KeyInputDevice':
        return self.add_action({"type": "keyDown", "value": value})

    def key_up(self, value: str) -> 'KeyInputDevice':
        return self.add_action({"type": "keyUp", "value": value})

    def send_keys(self, text: str) -> 'KeyInputDevice':
        """Press and release each character of `text` in turn"""
        for char in text:
            self.key_down(char)
            self.key_up(char)
        return self


class PointerInputDevice(InputDevice):
    type = DeviceType.POINTER

    def __init__(self, name: str, parameters: Optional[Dict[str, Any]] = None):
        parameters = dict(parameters or {})
        parameters["pointerType"] = validate_pointer_type(parameters.get("pointerType", "mouse"))
        super().__init__(name, parameters)

    def pointer_move(self, x: int, y: int, duration: Optional[int] = None,
                     origin: Origin = "viewport") -> 'PointerInputDevice':
        """
        Move the pointer.

        Args:
            x, y: Target coordinates, relative to `origin`
            duration: Duration of the move in milliseconds
            origin: 'viewport', 'pointer' or an element id
        """
        action = {"type": "pointerMove", "x": int(x), "y": int(y), "origin": _origin(origin)}
        if validate_duration(duration) is not None:
            action["duration"] = duration
        return self.add_action(action)

    def pointer_down(self, button: int = 0) -> 'PointerInputDevice':
        return self.add_action({"type": "pointerDown", "button": button})

    def pointer_up(self, button: int = 0) -> 'PointerInputDevice':
        return self.add_action({"type": "pointerUp", "button": button})

    def pointer_cancel(self) -> 'PointerInputDevice':
        return self.add_action({"type": "pointerCancel"})

    def click(self, button: int = 0) -> 'PointerInputDevice':
        return self.pointer_down(button).pointer_up(button)


class WheelInputDevice(InputDevice):
    type = DeviceType.WHEEL

    def scroll(self, x: int, y: int, delta_x: int, delta_y: int, duration: Optional[int] = None,
               origin: Origin = "viewport") -> 'WheelInputDevice':
        action = {
            "type": "scroll",
            "x": int(x),
            "y": int(y),
            "deltaX": int(delta_x),
            "deltaY": int(delta_y),
            "origin": _origin(origin),
        }
        if validate_duration(duration) is not None:
            action["duration"] = duration
        return self.add_action(action)


DEVICE_CLASSES = {
    DeviceType.NONE: NullInputDevice,
    DeviceType.KEY: KeyInputDevice,
    DeviceType.POINTER: PointerInputDevice,
    DeviceType.WHEEL: WheelInputDevice,
}


class ActionsBuilder:
    """Collects input devices and serializes them for Perform Actions"""

    def __init__(self):
        self._devices = {}
        self.log = logging.getLogger("WebDriverController.Actions")

    @property
    def devices(self) -> List[InputDevice]:
        return list(self._devices.values())

    def device(self, type: Union[DeviceType, str], name: str, **parameters) -> InputDevice:
        """
        Return the device called `name`, creating it if needed.

        Args:
            type: DeviceType or its string value
            name: Unique device id
            parameters: Device parameters (pointer_type for pointers)

        Raises:
            DuplicateDeviceError: If `name` is already used by another device type
        """
        device_type = DeviceType(type)
        existing = self._devices.get(name)
        if existing is not None:
            if existing.type is not device_type:
                raise DuplicateDeviceError("Device '{}' is already registered as {}, not {}".format(
                    name, existing.type.value, device_type.value))
            return existing

        wire_parameters = {}
        if "pointer_type" in parameters:
            wire_parameters["pointerType"] = parameters.pop("pointer_type")
        wire_parameters.update(parameters)

        device = DEVICE_CLASSES[device_type](name, wire_parameters)
        self._devices[name] = device
        self.log.debug("Registered {} device '{}'".format(device_type.value, name))
        return device

    def keyboard(self, name: str = "keyboard") -> KeyInputDevice:
        return self.device(DeviceType.KEY, name)

    def pointer(self, name: str = "mouse", pointer_type: str = "mouse") -> PointerInputDevice:
        return self.device(DeviceType.POINTER, name, pointer_type=pointer_type)

    def wheel(self, name: str = "wheel") -> WheelInputDevice:
        return self.device(DeviceType.WHEEL, name)

    def none(self, name: str = "none") -> NullInputDevice:
        return self.device(DeviceType.NONE, name)

    def build(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Serialize all devices into the Perform Actions body.

        Devices are padded with pauses to the length of the longest one.
        Devices without any action are left out, rather than padded from zero.
        Building does not modify the builder, so it can be repeated.
        """
        used = [device for device in self._devices.values() if len(device)]
        ticks = max((len(device) for device in used), default=0)
        return {"actions": [device.serialize(ticks) for device in used]}
