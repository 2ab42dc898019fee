"""Format versions and their track-line rules."""
from __future__ import annotations

from enum import Enum


class FormatVersion(str, Enum):
    """Known ``#AUDIOSCROBBLER/<version>`` values and their line rules."""

    V1_0 = "1.0"
    V1_1 = "1.1"

    @property
    def field_count(self) -> int:
        """Exact number of tab-separated fields per track line."""
        return 8 if self.has_musicbrainz_id else 7

    @property
    def has_musicbrainz_id(self) -> bool:
        return self is FormatVersion.V1_1

    @classmethod
    def known(cls) -> list[str]:
        return [v.value for v in cls]
