"""In-memory membership store: nickname -> monotonic join time."""

from __future__ import annotations


class MembershipStore:
    """Who is in the channel and since when.

    Iteration order follows the most recent ``record_present`` call, so with
    a monotonic clock entries are always ordered oldest first.
    """

    def __init__(self) -> None:
        self._joined: dict[str, float] = {}

    def record_present(self, nickname: str, now: float) -> None:
        # Re-insert rather than overwrite so the entry moves to the end
        self._joined.pop(nickname, None)
        self._joined[nickname] = now

    def remove(self, nickname: str) -> None:
        self._joined.pop(nickname, None)

    def snapshot(self) -> list[tuple[str, float]]:
        return list(self._joined.items())

    def get(self, nickname: str) -> float | None:
        return self._joined.get(nickname)

    def __contains__(self, nickname: object) -> bool:
        return nickname in self._joined

    def __len__(self) -> int:
        return len(self._joined)
