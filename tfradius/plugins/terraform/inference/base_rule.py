from abc import ABC, abstractmethod
from collections.abc import Collection


class BaseRule(ABC):
    """Abstract base class for namespace inference rules."""

    namespace: str

    @abstractmethod
    def match(
        self, provider_tokens: Collection[str], keyword_tokens: Collection[str]
    ) -> int | None:
        """Return a match score for the given tokens, or None when it does not apply."""
        pass
