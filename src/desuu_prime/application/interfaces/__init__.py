"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from desuu_prime.application.interfaces.audio_resolver import ItemResolver
from desuu_prime.application.interfaces.playback_backend import EndListener, PlaybackBackend
from desuu_prime.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "ItemResolver",
    "PlaybackBackend",
    "EndListener",
    "VoiceAdapter",
]
