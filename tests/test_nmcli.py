"""Tests for nmcli output parsing and command construction.

No wireless hardware is touched: subprocess.run is mocked throughout.
"""

import subprocess
from unittest import mock

import pytest

from captive_gateway.services.commands import Network
from captive_gateway.services.nmcli import (
    NmcliBackend,
    classify_security,
    parse_nmcli_fields,
    parse_wifi_list,
)


def _completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestParseNmcliFields:
    def test_simple_fields(self):
        assert parse_nmcli_fields("a:b:c") == ["a", "b", "c"]

    def test_escaped_colons(self):
        assert parse_nmcli_fields(r"foo\:bar:baz") == ["foo:bar", "baz"]

    def test_multiple_escaped_colons(self):
        assert parse_nmcli_fields(r"a\:b\:c:d") == ["a:b:c", "d"]

    def test_empty_fields(self):
        assert parse_nmcli_fields("::") == ["", "", ""]

    def test_empty_string(self):
        assert parse_nmcli_fields("") == [""]


class TestClassifySecurity:
    @pytest.mark.parametrize(
        ("flags", "expected"),
        [
            ("", "none"),
            ("--", "none"),
            ("WPA2", "wpa2"),
            ("WPA1 WPA2", "wpa2"),
            ("WPA3", "wpa2"),
            ("WPA1", "wpa"),
            ("WEP", "wep"),
            ("WPA2 802.1X", "enterprise"),
        ],
    )
    def test_mapping(self, flags, expected):
        assert classify_security(flags) == expected


class TestParseWifiList:
    def test_parses_and_sorts_by_signal(self):
        output = "Cafe:40:WPA2\nHome:80:WPA2\nOpen:60:\n"
        assert parse_wifi_list(output) == [
            Network(ssid="Home", signal_strength=80, security="wpa2"),
            Network(ssid="Open", signal_strength=60, security="none"),
            Network(ssid="Cafe", signal_strength=40, security="wpa2"),
        ]

    def test_skips_hidden_networks(self):
        assert parse_wifi_list(":70:WPA2\nHome:50:WPA2") == [
            Network(ssid="Home", signal_strength=50, security="wpa2"),
        ]

    def test_keeps_strongest_duplicate(self):
        networks = parse_wifi_list("Home:30:WPA2\nHome:75:WPA2")
        assert networks == [Network(ssid="Home", signal_strength=75, security="wpa2")]

    def test_ssid_with_colon(self):
        networks = parse_wifi_list(r"My\:Net:55:WPA2")
        assert networks[0].ssid == "My:Net"

    def test_invalid_signal_defaults_to_zero(self):
        assert parse_wifi_list("Home:??:WPA2")[0].signal_strength == 0

    def test_short_lines_ignored(self):
        assert parse_wifi_list("garbage\n") == []


class TestNmcliBackend:
    def test_scan(self):
        backend = NmcliBackend("wlan1")
        with mock.patch("subprocess.run", return_value=_completed("Home:80:WPA2\n")) as run:
            networks = backend.scan()
        assert networks == [Network(ssid="Home", signal_strength=80, security="wpa2")]
        args = run.call_args[0][0]
        assert args[0] == "nmcli"
        assert "wlan1" in args

    def test_scan_failure_returns_empty(self):
        with mock.patch("subprocess.run", return_value=_completed(returncode=10, stderr="no")):
            assert NmcliBackend().scan() == []

    def test_scan_missing_binary_returns_empty(self):
        with mock.patch("subprocess.run", side_effect=FileNotFoundError("nmcli")):
            assert NmcliBackend().scan() == []

    def test_start_hotspot_with_passphrase(self):
        with mock.patch("subprocess.run", return_value=_completed()) as run:
            assert NmcliBackend().start_hotspot("Portal", "password1") is True
        args = run.call_args[0][0]
        assert args[args.index("ssid") + 1] == "Portal"
        assert args[args.index("password") + 1] == "password1"

    def test_start_open_hotspot_omits_password(self):
        with mock.patch("subprocess.run", return_value=_completed()) as run:
            NmcliBackend().start_hotspot("Portal", "")
        assert "password" not in run.call_args[0][0]

    def test_start_hotspot_failure(self):
        error = subprocess.CalledProcessError(1, ["nmcli"], stderr="no device")
        with mock.patch("subprocess.run", side_effect=error):
            assert NmcliBackend().start_hotspot("Portal", "") is False

    def test_stop_hotspot_tolerates_timeout(self):
        with mock.patch("subprocess.run", side_effect=subprocess.TimeoutExpired("nmcli", 10)):
            NmcliBackend().stop_hotspot()

    def test_connect_personal_network(self):
        with mock.patch("subprocess.run", return_value=_completed()) as run:
            assert NmcliBackend("wlan0").connect("Home", "", "secret") is True
        args = run.call_args[0][0]
        assert args[1:5] == ["device", "wifi", "connect", "Home"]
        assert args[-2:] == ["password", "secret"]

    def test_connect_open_network_omits_password(self):
        with mock.patch("subprocess.run", return_value=_completed()) as run:
            NmcliBackend().connect("Cafe", "", "")
        assert "password" not in run.call_args[0][0]

    def test_connect_enterprise_network(self):
        with mock.patch("subprocess.run", return_value=_completed()) as run:
            assert NmcliBackend().connect("Office", "alice", "pw") is True
        add_args = run.call_args_list[0][0][0]
        up_args = run.call_args_list[1][0][0]
        assert add_args[add_args.index("802-1x.identity") + 1] == "alice"
        assert add_args[add_args.index("802-1x.password") + 1] == "pw"
        assert up_args == ["nmcli", "connection", "up", "Office"]

    def test_connect_failure(self):
        with mock.patch("subprocess.run", return_value=_completed(returncode=4, stderr="bad")):
            assert NmcliBackend().connect("Home", "", "wrong") is False

    def test_connect_timeout(self):
        with mock.patch("subprocess.run", side_effect=subprocess.TimeoutExpired("nmcli", 60)):
            assert NmcliBackend().connect("Home", "", "secret") is False
