"""
Domain Layer

Contains pure scheduling logic organized by bounded contexts:
- shared/: Constrained types, message catalogues and exceptions
- music/: Playable items, the track queue, playback state and guild sessions
"""

from desuu_prime.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
