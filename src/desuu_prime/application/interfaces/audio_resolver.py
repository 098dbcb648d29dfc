"""Port interface for resolving identifiers into playable items."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from desuu_prime.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.value_objects import LoadResult


class ItemResolver(ABC):
    """Interface for turning a URL, search string or file path into playable items.

    Implementations never raise for lookup failures: every outcome is one of
    the ``LoadResult`` variants.
    """

    @abstractmethod
    async def resolve(self, identifier: NonEmptyStr) -> "LoadResult":
        """Resolve ``identifier`` to a single item, a playlist, no match, or a failure."""
        ...
