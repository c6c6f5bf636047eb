"""
Client-side copy of the journal tree.

Nodes are held in a flat arena keyed by id. Only the parent pointer is
stored per node; the children index is built the first time it is needed.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class JournalNode:
    id: str
    name: str = ""
    parent_id: Optional[str] = None


class JournalTree:

    def __init__(self, nodes: Iterable[JournalNode] = ()):
        self._nodes: Dict[str, JournalNode] = {node.id: node for node in nodes}
        self._children: Optional[Dict[Optional[str], Tuple[str, ...]]] = None

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping]) -> "JournalTree":
        """Build from journal rows as returned by ``GET /journals``."""
        return cls(
            JournalNode(id=row["id"], name=row.get("name", ""), parent_id=row.get("parent_id"))
            for row in rows
        )

    def __contains__(self, journal_id) -> bool:
        return journal_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, journal_id: str) -> Optional[JournalNode]:
        return self._nodes.get(journal_id)

    def parent_id(self, journal_id: str) -> Optional[str]:
        node = self._nodes.get(journal_id)
        return node.parent_id if node else None

    def _children_index(self) -> Dict[Optional[str], Tuple[str, ...]]:
        if self._children is None:
            index: Dict[Optional[str], List[str]] = {}
            for node in sorted(self._nodes.values(), key=lambda n: n.id):
                # Parents missing from the arena make their children roots
                parent_id = node.parent_id if node.parent_id in self._nodes else None
                index.setdefault(parent_id, []).append(node.id)
            self._children = {parent_id: tuple(ids) for parent_id, ids in index.items()}
        return self._children

    def children_ids(self, journal_id: Optional[str]) -> Tuple[str, ...]:
        """Direct children of ``journal_id``; ``None`` lists the roots."""
        return self._children_index().get(journal_id, ())

    def root_ids(self) -> Tuple[str, ...]:
        return self.children_ids(None)

    def ancestor_ids(self, journal_id: str) -> Tuple[str, ...]:
        """Root-first path ending at ``journal_id``; empty when unknown."""
        if journal_id not in self._nodes:
            return ()
        path = [journal_id]
        seen = {journal_id}
        parent_id = self.parent_id(journal_id)
        while parent_id is not None and parent_id in self._nodes:
            if parent_id in seen:
                raise ValueError(f"Journal tree has a cycle through '{parent_id}'")
            seen.add(parent_id)
            path.append(parent_id)
            parent_id = self.parent_id(parent_id)
        return tuple(reversed(path))

    def descendant_ids(self, journal_id: str) -> Tuple[str, ...]:
        """``journal_id`` and everything below it, breadth first."""
        if journal_id not in self._nodes:
            return ()
        result = [journal_id]
        seen = {journal_id}
        index = 0
        while index < len(result):
            for child_id in self.children_ids(result[index]):
                if child_id not in seen:
                    seen.add(child_id)
                    result.append(child_id)
            index += 1
        return tuple(result)

    def is_within(self, journal_id: str, ancestor_id: str) -> bool:
        """True if ``journal_id`` is ``ancestor_id`` or lies below it."""
        return ancestor_id in self.ancestor_ids(journal_id)
