"""IRC line parsing — raw line -> Message -> Event."""

from __future__ import annotations

from dataclasses import dataclass, field

from autovoice.irc.base import Event, Join, Names, Other, Part

RPL_NAMREPLY = "353"
RPL_ISUPPORT = "005"


@dataclass(frozen=True, slots=True)
class Prefix:
    """Message originator: ``nick!user@host`` or a server name."""

    nickname: str | None = None
    user: str | None = None
    host: str | None = None
    server: str | None = None

    @classmethod
    def parse(cls, raw: str) -> Prefix | None:
        if not raw:
            return None
        if "!" in raw or "@" in raw:
            rest, _, host = raw.partition("@")
            nickname, _, user = rest.partition("!")
            return cls(nickname=nickname or None, user=user or None, host=host or None)
        # Bare names with a dot are servers (irc.libera.chat), otherwise nicks
        if "." in raw:
            return cls(server=raw)
        return cls(nickname=raw)


@dataclass(frozen=True, slots=True)
class Message:
    raw: str
    command: str
    params: tuple[str, ...] = ()
    prefix: Prefix | None = None
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def nickname(self) -> str | None:
        return self.prefix.nickname if self.prefix else None


def _split_tags(raw: str) -> tuple[dict[str, str], str]:
    if not raw.startswith("@"):
        return {}, raw
    tags_part, _, remainder = raw.partition(" ")
    tags: dict[str, str] = {}
    for pair in tags_part[1:].split(";"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        tags[key] = value
    return tags, remainder.lstrip(" ")


def parse_line(raw: str) -> Message:
    """Parse one IRC line (without CRLF) into a Message.

    Lines with no command produce ``Message(command="")`` rather than raising;
    ``to_event`` turns those into ``Other``.
    """
    line = raw.rstrip("\r\n")
    tags, rest = _split_tags(line)

    prefix = None
    if rest.startswith(":"):
        prefix_part, _, rest = rest[1:].partition(" ")
        prefix = Prefix.parse(prefix_part)
        rest = rest.lstrip(" ")

    if " :" in rest:
        middle, trailing = rest.split(" :", 1)
        parts = middle.split()
        parts.append(trailing)
    elif rest.startswith(":"):
        parts = [rest[1:]]
    else:
        parts = rest.split()

    if not parts:
        return Message(raw=line, command="", prefix=prefix, tags=tags)

    return Message(
        raw=line,
        command=parts[0].upper(),
        params=tuple(parts[1:]),
        prefix=prefix,
        tags=tags,
    )


def _param(message: Message, index: int) -> str | None:
    if index < len(message.params):
        return message.params[index]
    return None


def to_event(message: Message) -> Event:
    """Map a parsed message onto the closed set of events the engine handles."""
    nickname = message.nickname
    command = message.command

    if command == "JOIN" and nickname:
        channel = _param(message, 0)
        if channel:
            return Join(nickname=nickname, channel=channel)
    elif command == "PART" and nickname:
        channel = _param(message, 0)
        if channel:
            return Part(nickname=nickname, channel=channel)
    elif command == RPL_NAMREPLY:
        # <me> <=|*|@> <channel> :<names>
        return Names(channel=_param(message, 2), names=_param(message, 3))

    return Other(command=command, params=message.params)
