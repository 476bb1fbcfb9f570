"""Base types for the IRC transport — events, errors and the transport protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Protocol, Union


@dataclass(frozen=True, slots=True)
class Join:
    """A user joined a channel."""

    nickname: str
    channel: str


@dataclass(frozen=True, slots=True)
class Part:
    """A user left a channel."""

    nickname: str
    channel: str


@dataclass(frozen=True, slots=True)
class Names:
    """RPL_NAMREPLY — a (partial) roster of the channel.

    ``names`` is the raw space-delimited list, role prefixes included.
    ``channel`` or ``names`` is None when the server sent a short reply.
    """

    channel: str | None
    names: str | None


@dataclass(frozen=True, slots=True)
class Other:
    """Any message the engine does not act on."""

    command: str
    params: tuple[str, ...] = ()


Event = Union[Join, Part, Names, Other]


class AutovoiceError(Exception):
    """Base exception for autovoice."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context


class TransportError(AutovoiceError):
    """The IRC connection failed or a command could not be sent."""


class MalformedEventError(AutovoiceError):
    """A protocol message was missing required fields."""


class Transport(Protocol):
    """What the promotion engine needs from an IRC connection."""

    def events(self) -> AsyncIterator[Event]:
        """Yield parsed events until the connection ends."""
        ...

    async def set_voice(self, channel: str, nickname: str) -> None:
        """Grant +v to ``nickname`` in ``channel``."""
        ...
