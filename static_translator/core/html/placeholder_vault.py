"""
Placeholder vault for protected markup

Scripts, styles and code blocks are captured verbatim and replaced in the
document by comment tokens (<!--__HTMLT_PROTECTED_0__-->) that the
translation step never alters. A vault is created fresh for every extraction
pass and restored once, after reinjection.
"""
from collections import Counter
from typing import Dict, List, Sequence

from static_translator.core.exceptions import PlaceholderLeakError
from static_translator.core.models import PlaceholderEntry
from static_translator.utils.unified_logger import get_logger
from .constants import (
    PLACEHOLDER_TOKEN_PATTERN,
    create_placeholder_comment,
    create_placeholder_token,
)


class PlaceholderVault:
    """
    Ordered table of token -> raw markup

    Example:
        >>> vault = PlaceholderVault()
        >>> vault.protect('<script>var x=1;</script>')
        '__HTMLT_PROTECTED_0__'
        >>> vault.restore('<body><!--__HTMLT_PROTECTED_0__--></body>')
        '<body><script>var x=1;</script></body>'
    """

    def __init__(self, entries: Sequence[PlaceholderEntry] = ()):
        self._entries: List[PlaceholderEntry] = list(entries)
        self._lookup: Dict[str, str] = {entry.token: entry.raw_markup for entry in self._entries}

    @property
    def entries(self) -> List[PlaceholderEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def protect(self, raw_markup: str) -> str:
        """
        Store a protected fragment and return the comment body to put in its place

        Args:
            raw_markup: Verbatim outer markup of the protected element

        Returns:
            Comment text for the placeholder node
        """
        index = len(self._entries)
        entry = PlaceholderEntry(token=create_placeholder_token(index), raw_markup=raw_markup)
        self._entries.append(entry)
        self._lookup[entry.token] = raw_markup
        return create_placeholder_comment(index)

    def restore(self, text: str) -> str:
        """
        Replace every token by its raw markup in a single pass

        Raises:
            PlaceholderLeakError: If a token has no entry in this vault
        """
        leaked = []
        seen = Counter()

        def replace_token(match):
            token = match.group(0)
            if token not in self._lookup:
                leaked.append(token)
                return token
            seen[token] += 1
            return self._lookup[token]

        restored = PLACEHOLDER_TOKEN_PATTERN.sub(replace_token, text)

        if leaked:
            raise PlaceholderLeakError(
                f"{len(leaked)} placeholder token(s) could not be restored",
                leaked_tokens=leaked
            )

        missing = [token for token in self._lookup if seen[token] == 0]
        duplicated = [token for token, count in seen.items() if count > 1]
        if missing or duplicated:
            get_logger().warning(
                f"Placeholder restoration mismatch: {len(missing)} missing, {len(duplicated)} duplicated"
            )
        return restored

    @staticmethod
    def token_counts(text: str) -> Counter:
        """Multiset of placeholder indexes present in a text"""
        return Counter(PLACEHOLDER_TOKEN_PATTERN.findall(text))

    @staticmethod
    def is_token_only(text: str) -> bool:
        return PLACEHOLDER_TOKEN_PATTERN.fullmatch(text.strip()) is not None
