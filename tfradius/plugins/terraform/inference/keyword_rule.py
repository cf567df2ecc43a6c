from collections.abc import Collection

from .base_rule import BaseRule


class KeywordRule(BaseRule):
    """
    A rule matching a provider token plus one of its category keywords.

    Keywords match tokens that equal them or start with them, so
    ``network`` also covers ``networking``. The score is the length of the
    longest keyword that matched; rules without keywords match on the
    provider alone with score 0.
    """

    def __init__(
        self, providers: list[str], keywords: list[str], namespace: str
    ) -> None:
        if not providers:
            raise ValueError("a keyword rule needs at least one provider token")
        self._providers = frozenset(p.lower() for p in providers)
        self._keywords = tuple(k.lower() for k in keywords)
        self.namespace = namespace

    @property
    def provider_only(self) -> bool:
        return not self._keywords

    def match(
        self, provider_tokens: Collection[str], keyword_tokens: Collection[str]
    ) -> int | None:
        if self._providers.isdisjoint(provider_tokens):
            return None
        if self.provider_only:
            return 0

        best: int | None = None
        for keyword in self._keywords:
            if any(token.startswith(keyword) for token in keyword_tokens):
                if best is None or len(keyword) > best:
                    best = len(keyword)
        return best

    def __repr__(self) -> str:
        return (
            f"KeywordRule(providers={sorted(self._providers)}, "
            f"keywords={list(self._keywords)}, namespace={self.namespace!r})"
        )
