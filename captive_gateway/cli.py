"""Command line entry point: start the controller and serve the portal."""

import argparse
import logging
import sys

from captive_gateway.core.config import Settings, validate_settings
from captive_gateway.main import create_app
from captive_gateway.server import serve
from captive_gateway.services.bridge import ControllerBridge
from captive_gateway.services.channel import Channel
from captive_gateway.services.controller import NetworkController
from captive_gateway.services.nmcli import NmcliBackend
from captive_gateway.services.shutdown import ShutdownContext
from captive_gateway.services.state import RequestState

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Captive portal for WiFi configuration")
    parser.add_argument("-g", "--gateway", help="Gateway address the portal listens on")
    parser.add_argument("-p", "--listening-port", type=int, help="HTTP listening port")
    parser.add_argument("-i", "--interface", help="Wireless interface for the hotspot")
    parser.add_argument("-s", "--ssid", help="SSID of the portal hotspot")
    parser.add_argument("-a", "--passphrase", help="WPA2 passphrase of the portal hotspot")
    parser.add_argument("-u", "--ui-directory", help="Web UI directory")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with command line overrides applied."""
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    settings = Settings(**overrides)
    validate_settings(settings)
    return settings


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Handlers first so configuration warnings use the same format
    logging.basicConfig(format="[%(levelname)s] %(name)s: %(message)s", stream=sys.stdout)
    settings = load_settings(args)
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info("Gateway: %s", settings.gateway)
    logger.info("Hotspot SSID: %s", settings.ssid)

    commands = Channel(name="commands")
    responses = Channel(name="responses")
    shutdown = ShutdownContext()

    controller = NetworkController(
        commands,
        responses,
        shutdown,
        NmcliBackend(settings.interface),
        ssid=settings.ssid,
        passphrase=settings.passphrase,
    )
    try:
        if controller.prepare():
            controller.start()
            state = RequestState(settings.gateway, ControllerBridge(commands, responses), shutdown)
            serve(create_app(state, settings), settings, shutdown)
    finally:
        controller.stop()

    if shutdown.signal is not None:
        logger.error("Exiting: %s", shutdown.signal.description)
    else:
        logger.info("Portal stopped")
    return shutdown.exit_code


if __name__ == "__main__":
    sys.exit(main())
