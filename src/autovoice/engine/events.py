"""Apply one IRC event to the membership store."""

from __future__ import annotations

import logging

from autovoice.engine.store import MembershipStore
from autovoice.irc.base import Event, Join, MalformedEventError, Names, Other, Part
from autovoice.irc.parser import RPL_ISUPPORT

log = logging.getLogger(__name__)

# Users with these already have +v or can self-assign it
# TODO: read PREFIX from RPL_ISUPPORT instead of hardcoding
SPECIAL_PREFIXES = ("@", "+", "~", "&", "%")


def has_special_role(name: str) -> bool:
    return name.startswith(SPECIAL_PREFIXES)


def apply_event(store: MembershipStore, event: Event, now: float) -> None:
    """Update ``store`` from ``event``.

    Raises MalformedEventError for a NAMES reply missing its channel or
    names; the store is left untouched in that case.
    """
    if isinstance(event, Join):
        log.debug("User has joined channel (user=%r, channel=%r)", event.nickname, event.channel)
        store.record_present(event.nickname, now)
    elif isinstance(event, Part):
        log.debug("User has left channel (user=%r, channel=%r)", event.nickname, event.channel)
        store.remove(event.nickname)
    elif isinstance(event, Names):
        if event.channel is None or event.names is None:
            raise MalformedEventError(
                "Malformed user-list irc message", channel=event.channel, names=event.names
            )
        for name in event.names.split(" "):
            if not name or has_special_role(name):
                continue
            log.debug("User already in channel (user=%r, channel=%r)", name, event.channel)
            store.record_present(name, now)
    elif isinstance(event, Other):
        if event.command == RPL_ISUPPORT:
            log.debug("Received isupport message: %r", event.params)
