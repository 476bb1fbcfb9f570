"""IRC-over-TLS client — the transport the promotion engine runs against."""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import AsyncIterator

from autovoice.irc.base import Event, TransportError
from autovoice.irc.parser import Message, parse_line, to_event

log = logging.getLogger(__name__)

RPL_ENDOFMOTD = "376"
ERR_NOMOTD = "422"
ERR_NICKNAMEINUSE = "433"


class IRCClient:
    """Minimal IRC client.

    The caller owns the lifecycle: ``connect()``, then ``identify()``, then
    iterate ``events()`` until it raises. Connection errors surface as
    TransportError; there is no reconnect.
    """

    def __init__(
        self,
        server: str,
        nickname: str,
        channel: str,
        *,
        port: int = 6697,
        password: str | None = None,
        use_tls: bool = True,
    ) -> None:
        self.server = server
        self.port = port
        self.nickname = nickname
        self.channel = channel
        self.password = password
        self.use_tls = use_tls

        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    # --- Lifecycle ---

    async def connect(self) -> None:
        log.info(
            "Connecting to %s:%d (tls=%s) as %s", self.server, self.port, self.use_tls, self.nickname
        )
        try:
            self.reader, self.writer = await asyncio.open_connection(
                self.server, self.port, ssl=ssl.create_default_context() if self.use_tls else None
            )
        except OSError as e:
            raise TransportError(
                f"Failed to connect to {self.server}:{self.port}: {e}", server=self.server
            ) from e

        await self._send_raw(f"NICK {self.nickname}")
        await self._send_raw(f"USER {self.nickname} 0 * :{self.nickname}")

    async def identify(self) -> None:
        """Wait for registration to finish, then identify and join the channel."""
        while True:
            message = await self._read_message()
            if message is None:
                continue
            if message.command in (RPL_ENDOFMOTD, ERR_NOMOTD):
                break
            if message.command == ERR_NICKNAMEINUSE:
                raise TransportError(
                    f"Nickname {self.nickname!r} is already in use", nickname=self.nickname
                )
            if message.command == "ERROR":
                raise TransportError(
                    f"Server refused registration: {' '.join(message.params)}", server=self.server
                )

        if self.password:
            await self._send_raw(f"PRIVMSG NickServ :IDENTIFY {self.password}")
            log.info("Sent NickServ identification for %s", self.nickname)

        await self._send_raw(f"JOIN {self.channel}")
        log.info("Joining %s", self.channel)

    async def close(self) -> None:
        if not self.writer:
            return
        log.info("Closing IRC connection")
        try:
            await self._send_raw("QUIT :bye")
            self.writer.close()
            await self.writer.wait_closed()
        except (OSError, TransportError) as e:
            log.debug("Error during IRC close ignored: %s", e)
        finally:
            self.reader = None
            self.writer = None

    # --- Messaging ---

    async def events(self) -> AsyncIterator[Event]:
        """Yield events until the server closes the connection.

        Ends by raising TransportError, never by returning.
        """
        while True:
            message = await self._read_message()
            if message is not None:
                log.debug("Received msg from irc server: %r", message.raw)
                yield to_event(message)

    async def set_voice(self, channel: str, nickname: str) -> None:
        await self._send_raw(f"MODE {channel} +v {nickname}")

    # --- Internal helpers ---

    async def _read_message(self) -> Message | None:
        """Read one line. Returns None for blank lines and answered PINGs."""
        if not self.reader:
            raise TransportError("IRC reader is not initialized")
        try:
            line = await self.reader.readline()
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to read from irc stream: {e}", server=self.server) from e

        if line == b"":
            raise TransportError("irc client has been shutdown", server=self.server)

        decoded = line.decode("utf-8", errors="replace").strip()
        if not decoded:
            return None

        message = parse_line(decoded)
        if message.command == "PING":
            payload = message.params[-1] if message.params else ""
            await self._send_raw(f"PONG :{payload}")
            log.debug("Responded to PING")
            return None
        return message

    async def _send_raw(self, data: str) -> None:
        if not self.writer:
            raise TransportError("IRC writer is not initialized")
        try:
            self.writer.write((data + "\r\n").encode("utf-8"))
            await self.writer.drain()
        except (OSError, RuntimeError) as e:
            raise TransportError(f"Failed to send irc command: {e}", server=self.server) from e
