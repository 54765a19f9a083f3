#!/usr/bin/env python3

"""
WebDriverController Capabilities

This module assembles the payload sent with the new-session command:

    {
        "capabilities": {
            "alwaysMatch": {...},
            "firstMatch": [{...}, ...]
        },
        <root options>
    }

Keys are addressed with dotted paths ("timeouts.implicit"). Setting a path
creates the intermediate objects it needs.
"""

import copy
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Union

from .browsers import BrowserVariant


Path = Union[str, Sequence[str]]

MISSING = object()


def split_path(path: Path) -> List[str]:
    """Split a dotted path into its segments. Sequences are used as-is."""
    if isinstance(path, str):
        segments = path.split(".")
    else:
        segments = list(path)
    if not segments or any(not isinstance(s, str) or s == "" for s in segments):
        raise ValueError("Invalid capability path: {!r}".format(path))
    return segments


def get_path(mapping: Mapping, path: Path, default: Any = MISSING) -> Any:
    """
    Read the value stored at `path`.

    Returns `default` when any segment is missing or an intermediate value is
    not a mapping. With no default, a missing path raises KeyError.
    """
    current = mapping
    for segment in split_path(path):
        if not isinstance(current, Mapping) or segment not in current:
            if default is MISSING:
                raise KeyError(path)
            return default
        current = current[segment]
    return current


_ABSENT = object()


def has_path(mapping: Mapping, path: Path) -> bool:
    return get_path(mapping, path, _ABSENT) is not _ABSENT


def is_occupied(mapping: Mapping, path: Path) -> bool:
    """True when `path` is set, or a segment on the way to it holds a non-mapping value"""
    current = mapping
    for segment in split_path(path):
        if not isinstance(current, Mapping):
            return True
        if segment not in current:
            return False
        current = current[segment]
    return True


def set_path(mapping: Dict, path: Path, value: Any) -> None:
    """
    Store `value` at `path`, creating intermediate dicts when absent.

    An intermediate value that is not a mapping is replaced by a dict.
    """
    segments = split_path(path)
    current = mapping
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value


class CapabilityConfigurator:
    """
    Builds the new-session payload.

    Writes are order-sensitive: with force=False a call never replaces a value
    that is already present (a scalar sitting where a nested path would go
    counts as present), so whichever layer (defaults or user overrides)
    is written first wins.
    """

    def __init__(self,
                 always_match: Optional[Mapping] = None,
                 first_match: Optional[List[Mapping]] = None,
                 root: Optional[Mapping] = None,
                 vendor_options_key: Optional[str] = None):
        """
        Args:
            always_match: Initial alwaysMatch object
            first_match: Initial firstMatch list
            root: Keys copied onto the payload root, next to `capabilities`
            vendor_options_key: Capability holding browser specific options
                                (e.g. 'moz:firefoxOptions')
        """
        always_match = {} if always_match is None else always_match
        first_match = [] if first_match is None else first_match
        root = {} if root is None else root

        if not isinstance(always_match, Mapping):
            raise TypeError("always_match must be a mapping")
        if not isinstance(first_match, list):
            raise TypeError("first_match must be a list")
        if not isinstance(root, Mapping):
            raise TypeError("root options must be a mapping")

        self.vendor_options_key = vendor_options_key
        self._parameters = {
            "capabilities": {
                "alwaysMatch": copy.deepcopy(dict(always_match)),
                "firstMatch": copy.deepcopy(list(first_match)),
            }
        }
        for key, value in root.items():
            self._parameters[key] = copy.deepcopy(value)

    @classmethod
    def for_variant(cls,
                    variant: BrowserVariant,
                    always_match: Optional[Mapping] = None,
                    first_match: Optional[List[Mapping]] = None,
                    root: Optional[Mapping] = None,
                    specific: Optional[Mapping] = None,
                    headless: bool = False) -> 'CapabilityConfigurator':
        """
        Build a configurator pre-loaded with a browser variant's defaults.

        Mandatory vendor options are forced, `browserName` is only set when
        the caller did not supply one, and every key of `specific` is placed
        under the variant's vendor options (e.g. `{'profile': 'tony'}` for
        Firefox sets `moz:firefoxOptions.profile`).
        """
        config = cls(always_match, first_match, root, vendor_options_key=variant.vendor_options_key)

        for key, value in variant.mandatory_vendor_options.items():
            config.set_vendor_option(key, value, force=True)

        if variant.browser_name:
            config.set_always_match("browserName", variant.browser_name)

        for key, value in (specific or {}).items():
            config.set_vendor_option([key], value)

        if headless and variant.headless_arguments:
            args = config.get_always_match([variant.vendor_options_key, "args"], [])
            args = list(args) + [a for a in variant.headless_arguments if a not in args]
            config.set_vendor_option("args", args, force=True)

        return config

    def set_always_match(self, path: Path, value: Any, force: bool = False) -> None:
        """
        Set a key (or a path) under `capabilities.alwaysMatch`.

        Example:
            config.set_always_match('timeouts.implicit', 10000, force=True)
        """
        always_match = self._parameters["capabilities"]["alwaysMatch"]
        if force or not is_occupied(always_match, path):
            set_path(always_match, path, copy.deepcopy(value))

    def get_always_match(self, path: Path, default: Any = None) -> Any:
        return copy.deepcopy(get_path(self._parameters["capabilities"]["alwaysMatch"], path, default))

    def add_first_match(self, name: str, value: Any, force: bool = False) -> None:
        """
        Append `{name: value}` to `capabilities.firstMatch`.

        Entries with the same name are all kept, in insertion order; the
        remote end evaluates each firstMatch entry on its own. `force` is
        accepted for symmetry with the other setters and does not change this.

        Example:
            config.add_first_match('browserName', 'chrome')
            config.add_first_match('browserName', 'firefox')
        """
        self._parameters["capabilities"]["firstMatch"].append({name: copy.deepcopy(value)})

    def set_root_option(self, path: Path, value: Any, force: bool = True) -> None:
        """
        Set a key (or a path) on the payload root, outside `capabilities`.

        Example:
            config.set_root_option('login', 'blah')
        """
        if force or not is_occupied(self._parameters, path):
            set_path(self._parameters, path, copy.deepcopy(value))

    def set_vendor_option(self, path: Path, value: Any, force: bool = False) -> None:
        """Set a key (or a path) below the browser's vendor options capability"""
        if not self.vendor_options_key:
            raise ValueError("This configurator has no vendor options key")
        self.set_always_match([self.vendor_options_key] + split_path(path), value, force)

    def get_capability_set(self) -> Dict[str, Any]:
        """
        Return the full new-session payload.

        The result is a copy, so it stays stable however the caller mutates
        it. An empty firstMatch list is sent as `[{}]`, the protocol default.
        This differs from clients that send an empty list there, although
        remote ends treat both the same way.
        """
        parameters = copy.deepcopy(self._parameters)
        if not parameters["capabilities"]["firstMatch"]:
            parameters["capabilities"]["firstMatch"] = [{}]
        return parameters
