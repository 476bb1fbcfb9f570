"""Pick the next member to voice."""

from __future__ import annotations

from autovoice.engine.store import MembershipStore


def select(store: MembershipStore, cooldown: float, now: float) -> str | None:
    """Return the first nickname present for longer than ``cooldown`` seconds.

    The store iterates oldest first, so this is also the longest-waiting
    member. Returns None when nobody qualifies.
    """
    for nickname, joined_at in store.snapshot():
        if now - joined_at > cooldown:
            return nickname
    return None
