#!/usr/bin/env python3

"""
Tests for capability assembly and browser variants.

No driver is needed: these only build new-session payloads.
"""

import pytest

from WebDriverController.browsers import CHROME, FIREFOX, GENERIC, default_executable, get_variant
from WebDriverController.capabilities import (
    CapabilityConfigurator,
    get_path,
    has_path,
    set_path,
    split_path,
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

class TestPaths:
    """Dotted path helpers"""

    def test_split_dotted_and_sequence(self):
        assert split_path("timeouts.implicit") == ["timeouts", "implicit"]
        assert split_path(["moz:firefoxOptions", "prefs"]) == ["moz:firefoxOptions", "prefs"]

    @pytest.mark.parametrize("path", ["", "a..b", [], ["a", ""]])
    def test_split_rejects_empty_segments(self, path):
        with pytest.raises(ValueError):
            split_path(path)

    def test_set_creates_intermediate_objects(self):
        data = {}
        set_path(data, "a.b.c", 1)
        assert data == {"a": {"b": {"c": 1}}}

    def test_set_replaces_non_mapping_intermediate(self):
        data = {"a": 5}
        set_path(data, "a.b", 1)
        assert data == {"a": {"b": 1}}

    def test_get_missing(self):
        assert get_path({"a": {"b": 1}}, "a.c", None) is None
        assert get_path({"a": 1}, "a.b", "default") == "default"
        with pytest.raises(KeyError):
            get_path({}, "a")

    def test_has_path_with_none_value(self):
        assert has_path({"a": None}, "a")
        assert not has_path({"a": None}, "b")


# ---------------------------------------------------------------------------
# CapabilityConfigurator
# ---------------------------------------------------------------------------

class TestCapabilityConfigurator:
    """Payload assembly"""

    def test_nested_always_match(self):
        config = CapabilityConfigurator()
        config.set_always_match("timeouts.implicit", 10000)
        payload = config.get_capability_set()
        assert payload["capabilities"]["alwaysMatch"] == {"timeouts": {"implicit": 10000}}

    def test_existing_value_kept_without_force(self):
        config = CapabilityConfigurator({"browserName": "firefox"})
        config.set_always_match("browserName", "chrome")
        assert config.get_always_match("browserName") == "firefox"

        config.set_always_match("browserName", "chrome", force=True)
        assert config.get_always_match("browserName") == "chrome"

    def test_scalar_prefix_kept_without_force(self):
        config = CapabilityConfigurator({"proxy": "system"})
        config.set_always_match("proxy.proxyType", "manual")
        assert config.get_always_match("proxy") == "system"

        config.set_always_match("proxy.proxyType", "manual", force=True)
        assert config.get_always_match("proxy") == {"proxyType": "manual"}

    def test_scalar_prefix_kept_for_root_options(self):
        config = CapabilityConfigurator(root={"login": "blah"})
        config.set_root_option("login.user", "me", force=False)
        assert config.get_capability_set()["login"] == "blah"

    def test_first_write_wins(self):
        config = CapabilityConfigurator()
        config.set_always_match("acceptInsecureCerts", True)
        config.set_always_match("acceptInsecureCerts", False)
        assert config.get_always_match("acceptInsecureCerts") is True

    def test_first_match_keeps_duplicates_in_order(self):
        config = CapabilityConfigurator()
        config.add_first_match("browserName", "chrome")
        config.add_first_match("browserName", "firefox")
        config.add_first_match("browserName", "firefox", force=True)
        assert config.get_capability_set()["capabilities"]["firstMatch"] == [
            {"browserName": "chrome"},
            {"browserName": "firefox"},
            {"browserName": "firefox"},
        ]

    def test_empty_first_match_is_single_empty_object(self):
        payload = CapabilityConfigurator().get_capability_set()
        assert payload == {"capabilities": {"alwaysMatch": {}, "firstMatch": [{}]}}

    def test_root_options(self):
        config = CapabilityConfigurator(root={"desiredCapabilities": {"a": 1}})
        config.set_root_option("login", "blah")
        config.set_root_option("login", "other", force=False)
        payload = config.get_capability_set()
        assert payload["login"] == "blah"
        assert payload["desiredCapabilities"] == {"a": 1}
        assert set(payload["capabilities"]) == {"alwaysMatch", "firstMatch"}

    def test_capability_set_is_a_copy(self):
        config = CapabilityConfigurator()
        config.set_always_match("moz:firefoxOptions.args", ["-headless"])
        payload = config.get_capability_set()
        payload["capabilities"]["alwaysMatch"]["moz:firefoxOptions"]["args"].append("-private")
        payload["capabilities"]["firstMatch"][0]["x"] = 1

        again = config.get_capability_set()
        assert again["capabilities"]["alwaysMatch"]["moz:firefoxOptions"]["args"] == ["-headless"]
        assert again["capabilities"]["firstMatch"] == [{}]

    def test_inputs_are_copied(self):
        always_match = {"moz:firefoxOptions": {"prefs": {}}}
        config = CapabilityConfigurator(always_match)
        always_match["moz:firefoxOptions"]["prefs"]["x"] = 1
        assert config.get_always_match("moz:firefoxOptions.prefs") == {}

    @pytest.mark.parametrize("kwargs", [
        {"always_match": []},
        {"first_match": {}},
        {"root": "login"},
    ])
    def test_invalid_input_types(self, kwargs):
        with pytest.raises(TypeError):
            CapabilityConfigurator(**kwargs)

    def test_vendor_option_requires_key(self):
        with pytest.raises(ValueError):
            CapabilityConfigurator().set_vendor_option("args", [])


# ---------------------------------------------------------------------------
# Browser variants
# ---------------------------------------------------------------------------

class TestBrowserVariants:
    """Variant defaults applied through for_variant"""

    def test_chrome_forces_w3c(self):
        config = CapabilityConfigurator.for_variant(
            CHROME, always_match={"goog:chromeOptions": {"w3c": False}})
        payload = config.get_capability_set()
        assert payload["capabilities"]["alwaysMatch"]["goog:chromeOptions"]["w3c"] is True
        assert payload["capabilities"]["alwaysMatch"]["browserName"] == "chrome"

    def test_user_browser_name_kept(self):
        config = CapabilityConfigurator.for_variant(FIREFOX, always_match={"browserName": "firefox-nightly"})
        assert config.get_always_match("browserName") == "firefox-nightly"

    def test_specific_options_go_under_vendor_key(self):
        config = CapabilityConfigurator.for_variant(FIREFOX, specific={"profile": "tony", "log": {"level": "trace"}})
        assert config.get_always_match("moz:firefoxOptions") == {"profile": "tony", "log": {"level": "trace"}}

    def test_headless_arguments_added_once(self):
        config = CapabilityConfigurator.for_variant(
            FIREFOX, always_match={"moz:firefoxOptions": {"args": ["-headless", "-private"]}}, headless=True)
        assert config.get_always_match("moz:firefoxOptions.args") == ["-headless", "-private"]

        config = CapabilityConfigurator.for_variant(CHROME, headless=True)
        assert config.get_always_match("goog:chromeOptions.args") == ["--headless=new"]

    def test_generic_variant_sets_nothing(self):
        payload = CapabilityConfigurator.for_variant(GENERIC).get_capability_set()
        assert payload == {"capabilities": {"alwaysMatch": {}, "firstMatch": [{}]}}

    def test_lookup(self):
        assert get_variant("Firefox") is FIREFOX
        assert get_variant("remote") is GENERIC
        with pytest.raises(ValueError):
            get_variant("netscape")

    def test_default_executable(self):
        assert default_executable(FIREFOX, "linux") == "geckodriver"
        assert default_executable(FIREFOX, "win32") == "geckodriver.exe"
        assert default_executable(CHROME, "darwin") == "chromedriver"
        assert default_executable(GENERIC) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
