"""
Music Bounded Context

Domain model for playable items, per-guild queues and playback state.
"""

from desuu_prime.domain.music.entities import GuildSession, PlayableItem, TrackQueue
from desuu_prime.domain.music.value_objects import (
    EndReason,
    Idle,
    InterruptedFor,
    ItemLoaded,
    LoadFailed,
    LoadResult,
    NoMatches,
    PlaybackState,
    Playing,
    PlaylistLoaded,
    ResumeTarget,
)

__all__ = [
    # Entities
    "PlayableItem",
    "TrackQueue",
    "GuildSession",
    # Playback state
    "PlaybackState",
    "Idle",
    "Playing",
    "InterruptedFor",
    "ResumeTarget",
    "EndReason",
    # Resolver results
    "LoadResult",
    "ItemLoaded",
    "PlaylistLoaded",
    "NoMatches",
    "LoadFailed",
]
