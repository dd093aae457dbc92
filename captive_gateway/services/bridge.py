"""Synchronous call interface over the controller's channel pair.

There is a single controller and at most one call in flight (callers
hold the request state lock), so a plain send-then-receive rendezvous
pairs every response with its command without correlation ids.
"""

import logging

from captive_gateway.core.errors import CommandSendFailed, ResponseRecvFailed, UnexpectedResponse
from captive_gateway.services.channel import Channel, ChannelClosed
from captive_gateway.services.commands import Command, ControllerResponse, expected_response

logger = logging.getLogger(__name__)


class ControllerBridge:
    def __init__(
        self,
        commands: Channel[Command],
        responses: Channel[ControllerResponse],
    ) -> None:
        self._commands = commands
        self._responses = responses

    def call(self, command: Command) -> ControllerResponse:
        """Send a command and block until its response arrives.

        Raises:
            CommandSendFailed: the controller no longer accepts commands.
            ResponseRecvFailed: the response channel closed before a reply.
            UnexpectedResponse: the reply does not match the command.
        """
        expected = expected_response(command)

        try:
            self._commands.send(command)
        except ChannelClosed as e:
            raise CommandSendFailed(command) from e

        logger.debug("Sent %r, waiting for controller response", command)

        # No timeout: a stalled controller stalls this call
        try:
            response = self._responses.recv()
        except ChannelClosed as e:
            raise ResponseRecvFailed(command) from e

        if not isinstance(response, expected):
            raise UnexpectedResponse(command, response)
        return response
