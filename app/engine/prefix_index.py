"""Case-insensitive prefix tree for item-name autocomplete"""

from typing import Dict, Iterable, List, Optional

DEFAULT_ITEM_NAMES = (
    "Rice (1kg)",
    "Rice (5kg)",
    "Sugar (1kg)",
    "Oil (1L)",
    "Dal (1kg)",
    "Soap",
    "Tea",
)


class _Node:
    __slots__ = ("children", "word")

    def __init__(self):
        # Insertion-ordered; search results follow this order
        self.children: Dict[str, "_Node"] = {}
        # Original casing of the first word inserted for this path; None = not terminal
        self.word: Optional[str] = None


class PrefixIndex:
    """
    Prefix tree keyed by the lower-cased characters of item names.

    Lookups are case-insensitive but return names in the casing they were
    first inserted with. Neither operation raises: bad input behaves like
    an empty string.
    """

    def __init__(self, words: Iterable[str] = ()):
        self._root = _Node()
        self._size = 0
        for word in words:
            self.insert(word)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, word: object) -> bool:
        node = self._walk(word) if isinstance(word, str) and word else None
        return node is not None and node.word is not None

    def insert(self, word: str) -> None:
        if not isinstance(word, str) or not word:
            return
        node = self._root
        for char in word.lower():
            child = node.children.get(char)
            if child is None:
                child = node.children[char] = _Node()
            node = child
        if node.word is None:
            node.word = word
            self._size += 1

    def search(self, prefix: str, limit: int = 5) -> List[str]:
        """Up to `limit` names starting with `prefix`, in depth-first pre-order"""
        if not isinstance(prefix, str) or not prefix or limit <= 0:
            return []
        start = self._walk(prefix)
        if start is None:
            return []

        results: List[str] = []
        stack = [start]
        while stack:
            node = stack.pop()
            if node.word is not None:
                results.append(node.word)
                if len(results) >= limit:
                    break
            # Reversed so the first-inserted child is visited first
            stack.extend(reversed(node.children.values()))
        return results

    def _walk(self, text: str) -> Optional[_Node]:
        node = self._root
        for char in text.lower():
            node = node.children.get(char)
            if node is None:
                return None
        return node


def build_item_index(bills, *, shop_id: Optional[str] = None, defaults: Iterable[str] = DEFAULT_ITEM_NAMES) -> PrefixIndex:
    """
    Build a fresh index from every item name on `bills`.

    With `shop_id`, only that shop's bills are considered. When there are no
    bills to learn from, the index is seeded with `defaults` instead.
    """
    if shop_id is not None:
        bills = [bill for bill in bills if bill.shop_id == shop_id]
    else:
        bills = list(bills)

    index = PrefixIndex()
    if not bills:
        for name in defaults:
            index.insert(name)
        return index

    for bill in bills:
        for item in bill.items or ():
            index.insert(item.name)
    return index
