"""NetworkManager access through the nmcli command line tool."""

import logging
import subprocess

from captive_gateway.services.commands import Network

logger = logging.getLogger(__name__)

HOTSPOT_CONNECTION = "Hotspot"


def parse_nmcli_fields(line: str) -> list[str]:
    """Parse nmcli -t output, handling \\: escapes for literal colons in values."""
    fields = []
    current = []
    i = 0
    while i < len(line):
        if line[i] == "\\" and i + 1 < len(line) and line[i + 1] == ":":
            current.append(":")
            i += 2
        elif line[i] == ":":
            fields.append("".join(current))
            current = []
            i += 1
        else:
            current.append(line[i])
            i += 1
    fields.append("".join(current))
    return fields


def classify_security(flags: str) -> str:
    """Map an nmcli SECURITY column to the portal's security labels."""
    flags = flags.strip().upper()
    if not flags or flags == "--":
        return "none"
    if "802.1X" in flags:
        return "enterprise"
    if "WPA2" in flags or "WPA3" in flags:
        return "wpa2"
    if "WPA" in flags:
        return "wpa"
    if "WEP" in flags:
        return "wep"
    return flags.lower()


def parse_wifi_list(output: str) -> list[Network]:
    """Parse `nmcli -t -f SSID,SIGNAL,SECURITY device wifi list` output.

    Hidden and duplicate SSIDs are skipped; the strongest entry per SSID
    wins and the result is sorted by signal strength, strongest first.
    """
    best: dict[str, Network] = {}
    for line in output.strip().splitlines():
        parts = parse_nmcli_fields(line)
        if len(parts) < 3:
            continue
        ssid = parts[0].strip()
        if not ssid:
            continue
        try:
            signal = int(parts[1])
        except ValueError:
            signal = 0
        network = Network(ssid=ssid, signal_strength=signal, security=classify_security(parts[2]))
        if ssid not in best or best[ssid].signal_strength < signal:
            best[ssid] = network
    return sorted(best.values(), key=lambda n: n.signal_strength, reverse=True)


class NmcliBackend:
    """Hotspot and station control for one wireless interface."""

    def __init__(self, interface: str = "wlan0") -> None:
        self.interface = interface

    def _run(self, args: list[str], timeout: int = 15, check: bool = False):
        return subprocess.run(
            ["nmcli", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=check,
        )

    def scan(self) -> list[Network]:
        """Scan visible WiFi networks. Returns an empty list if the scan fails."""
        try:
            result = self._run(
                ["-t", "-f", "SSID,SIGNAL,SECURITY", "device", "wifi", "list",
                 "ifname", self.interface, "--rescan", "yes"],
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("WiFi scan failed: %s", e)
            return []
        if result.returncode != 0:
            logger.error("WiFi scan failed: %s", result.stderr.strip())
            return []
        return parse_wifi_list(result.stdout)

    def start_hotspot(self, ssid: str, passphrase: str) -> bool:
        """Start the portal access point. An empty passphrase makes it open."""
        logger.info("Starting hotspot: SSID=%s", ssid)
        args = ["device", "wifi", "hotspot", "con-name", HOTSPOT_CONNECTION,
                "ifname", self.interface, "ssid", ssid]
        if passphrase:
            args.extend(["password", passphrase])
        try:
            self._run(args, check=True)
        except subprocess.CalledProcessError as e:
            logger.error("Failed to start hotspot: %s", (e.stderr or "").strip())
            return False
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("Failed to start hotspot: %s", e)
            return False
        logger.info("Hotspot started")
        return True

    def stop_hotspot(self) -> None:
        logger.info("Stopping hotspot")
        try:
            self._run(["connection", "down", HOTSPOT_CONNECTION], timeout=10)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Hotspot stop: %s", e)

    def connect(self, ssid: str, identity: str, passphrase: str) -> bool:
        """Join a network. A non-empty identity selects WPA-Enterprise (PEAP)."""
        logger.info("Connecting to WiFi: %s", ssid)
        if identity:
            args = ["connection", "add", "type", "wifi", "con-name", ssid,
                    "ifname", self.interface, "ssid", ssid,
                    "wifi-sec.key-mgmt", "wpa-eap",
                    "802-1x.eap", "peap", "802-1x.phase2-auth", "mschapv2",
                    "802-1x.identity", identity, "802-1x.password", passphrase]
            try:
                self._run(args, timeout=10, check=True)
            except subprocess.CalledProcessError as e:
                logger.error("Creating connection for %s failed: %s", ssid, (e.stderr or "").strip())
                return False
            except (OSError, subprocess.SubprocessError) as e:
                logger.error("Creating connection for %s failed: %s", ssid, e)
                return False
            args = ["connection", "up", ssid]
        else:
            args = ["device", "wifi", "connect", ssid, "ifname", self.interface]
            if passphrase:
                args.extend(["password", passphrase])

        try:
            result = self._run(args, timeout=60)
        except subprocess.TimeoutExpired:
            logger.error("Connecting to %s timed out", ssid)
            return False
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("Connecting to %s failed: %s", ssid, e)
            return False

        if result.returncode != 0:
            logger.error("Connecting to %s failed: %s", ssid, result.stderr.strip())
            return False
        logger.info("Connected to %s", ssid)
        return True
