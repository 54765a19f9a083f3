#!/usr/bin/env python3

"""
Browser variants

Static data describing each supported driver: the `browserName` it expects,
where its vendor-specific options live, which options must always be forced,
and the executable to launch on each platform.
"""

import sys
from collections import namedtuple
from typing import Optional


BrowserVariant = namedtuple("BrowserVariant", [
    "name",
    "browser_name",
    "vendor_options_key",
    "mandatory_vendor_options",
    "executables",
    "port_argument",
    "headless_arguments",
])


CHROME = BrowserVariant(
    name="chrome",
    browser_name="chrome",
    vendor_options_key="goog:chromeOptions",
    # chromedriver only speaks the W3C dialect when this is set
    mandatory_vendor_options={"w3c": True},
    executables={"win32": "chromedriver.exe", "default": "chromedriver"},
    port_argument="--port={port}",
    headless_arguments=["--headless=new"],
)

FIREFOX = BrowserVariant(
    name="firefox",
    browser_name="firefox",
    vendor_options_key="moz:firefoxOptions",
    mandatory_vendor_options={},
    executables={"win32": "geckodriver.exe", "default": "geckodriver"},
    port_argument="--port={port}",
    headless_arguments=["-headless"],
)

# Remote ends (grids, already running drivers): nothing to launch
GENERIC = BrowserVariant(
    name="generic",
    browser_name=None,
    vendor_options_key=None,
    mandatory_vendor_options={},
    executables={},
    port_argument=None,
    headless_arguments=[],
)

VARIANTS = {variant.name: variant for variant in (CHROME, FIREFOX, GENERIC)}
VARIANTS["remote"] = GENERIC


def get_variant(name: str) -> BrowserVariant:
    """
    Look up a browser variant by name.

    Args:
        name: 'chrome', 'firefox', 'generic' or 'remote' (case-insensitive)

    Raises:
        ValueError: If no variant has that name
    """
    try:
        return VARIANTS[name.lower()]
    except KeyError:
        raise ValueError("Unknown browser '{}'. Valid browsers: {}".format(name, sorted(VARIANTS)))


def default_executable(variant: BrowserVariant, platform: str = sys.platform) -> Optional[str]:
    """Return the driver executable name for a variant on a platform, or None"""
    if not variant.executables:
        return None
    return variant.executables.get(platform, variant.executables["default"])
