"""
Candidate records produced by the source scrapers.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Set

NOT_FOUND = "not found"
MIN_NAME_LENGTH = 2


@dataclass(frozen=True)
class StartupCandidate:
    """One discovered startup, not yet persisted."""
    name: str
    website: str = NOT_FOUND
    linkedin_url: str = NOT_FOUND
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "website": self.website,
            "linkedin_url": self.linkedin_url,
            "source": self.source,
        }


def validate_candidate(candidate: StartupCandidate) -> bool:
    """A candidate is valid when its trimmed name has at least two characters."""
    if not candidate.name:
        return False
    return len(candidate.name.strip()) >= MIN_NAME_LENGTH


class SeenNames:
    """Case-insensitive set of names accepted during one scrape run."""

    def __init__(self):
        self._names: Set[str] = set()

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().lower()

    def __contains__(self, name: str) -> bool:
        return self._key(name) in self._names

    def add(self, name: str) -> None:
        self._names.add(self._key(name))

    def __len__(self) -> int:
        return len(self._names)
