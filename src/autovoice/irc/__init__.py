"""IRC transport — connection, line parsing and typed events."""

from autovoice.irc.base import (
    AutovoiceError,
    Event,
    Join,
    MalformedEventError,
    Names,
    Other,
    Part,
    Transport,
    TransportError,
)
from autovoice.irc.client import IRCClient
from autovoice.irc.parser import Message, Prefix, parse_line, to_event

__all__ = [
    "AutovoiceError",
    "Event",
    "IRCClient",
    "Join",
    "MalformedEventError",
    "Message",
    "Names",
    "Other",
    "Part",
    "Prefix",
    "Transport",
    "TransportError",
    "parse_line",
    "to_event",
]
