import os
from typing import Optional


class PathTrie:
    """
    A Trie (Prefix Tree) specialized for filesystem paths.
    Provides O(L) path lookup where L is the depth of the path.
    """

    def __init__(self):
        self.root = {}

    @staticmethod
    def _parts(path: str) -> list[str]:
        return [p for p in path.replace("\\", "/").split("/") if p]

    def insert(self, path: str):
        """Insert a normalized absolute path into the trie."""
        if not path:
            return
        node = self.root
        for part in self._parts(path):
            node = node.setdefault(part, {})
        node["__end__"] = path

    def find_most_specific_prefix(self, path: str) -> Optional[str]:
        """
        Finds the longest path in the trie that is a prefix of the given path.
        Returns the prefix path as it was inserted, or None.
        """
        if not path:
            return None
        node = self.root
        last_found = self.root.get("__end__")
        for part in self._parts(path):
            if part not in node:
                break
            node = node[part]
            if "__end__" in node:
                last_found = node["__end__"]
        return last_found


def relative_to_root(path: str, root: Optional[str]) -> str:
    """Root-relative path with OS separators, or the path itself without a root."""
    if not root:
        return path
    try:
        return os.path.relpath(path, root)
    except ValueError:
        return path
