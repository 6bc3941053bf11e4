"""Static topic configuration - keyword to destination channels."""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..utils.logger import get_app_logger


DEFAULT_TOPICS: Dict[str, List[str]] = {
    "LAPTOP": [],
    "MONITOR": [],
    "PENDRIVE": [],
    "MOUSE": [],
}


def match_keyword(text: str, keywords: Iterable[str]) -> Optional[str]:
    """
    Find the keyword contained in ``text``, case-insensitively.

    When several keywords match, the longest one wins; keywords of equal
    length keep the order of ``keywords``.

    Args:
        text: Free text to scan
        keywords: Candidate keywords in priority order

    Returns:
        Matching keyword as configured, or None
    """
    if not text:
        return None

    haystack = text.upper()
    best: Optional[str] = None
    for keyword in keywords:
        if keyword and keyword.upper() in haystack:
            if best is None or len(keyword) > len(best):
                best = keyword
    return best


class TopicRegistry:
    """Topic keyword to ordered destination set, loaded once at startup."""

    def __init__(self, topics: Optional[Dict[str, List[str]]] = None):
        self.logger = get_app_logger()
        self._topics: Dict[str, List[str]] = {}
        for keyword, destinations in (topics or {}).items():
            self._topics[keyword] = list(dict.fromkeys(destinations or []))

    @classmethod
    def from_file(cls, path: str) -> "TopicRegistry":
        """
        Load topics from a JSON file, seeding a template when absent.

        Args:
            path: Path to the topics file

        Returns:
            TopicRegistry instance
        """
        logger = get_app_logger()
        file_path = Path(path)

        if not file_path.exists():
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(DEFAULT_TOPICS, f, indent=2)
            logger.warning(f"{file_path} not found. Created a template. Please add your group IDs.")
            return cls(DEFAULT_TOPICS)

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Topics file must contain a JSON object: {file_path}")

        registry = cls(data)
        logger.info(f"Topics loaded: {', '.join(registry.keywords) or '(none)'}")
        return registry

    @property
    def keywords(self) -> List[str]:
        return list(self._topics.keys())

    def resolve(self, text: str) -> Optional[str]:
        """Resolve the topic keyword a requester message refers to."""
        return match_keyword(text, self._topics.keys())

    def destinations(self, topic: str) -> List[str]:
        return list(self._topics.get(topic, []))

    def is_configured(self, topic: str) -> bool:
        return topic in self._topics

    def to_dict(self) -> Dict[str, List[str]]:
        return {keyword: list(destinations) for keyword, destinations in self._topics.items()}
