"""
Commit graph queries.

Commits form a DAG through their parent links. This module resolves
(possibly abbreviated) commit ids, walks history and finds the split point
used as the base of a three-way merge.
"""

from collections import deque
from typing import Dict, Iterator, List

from .errors import CommitNotFoundError, CorruptObjectError, ObjectNotFoundError
from .logging import get_twig_logger, performance_monitor
from .objects import ID_LENGTH, Commit
from .storage import ObjectStore


class CommitGraph:
    """Read-only view of the commits held in an object store."""

    def __init__(self, store: ObjectStore):
        self.store = store
        self.log = get_twig_logger("graph")

    def get(self, commit_id: str) -> Commit:
        """Load a commit by full id, failing hard when it is missing."""
        return self.store.get_commit(commit_id)

    def resolve(self, id_or_prefix: str) -> Commit:
        """
        Resolve a full commit id or a unique prefix of one.

        Raises:
            CommitNotFoundError: No commit matches, the prefix is ambiguous,
                or the id names a non-commit object
        """
        if not id_or_prefix:
            raise CommitNotFoundError(id_or_prefix)

        if len(id_or_prefix) == ID_LENGTH:
            try:
                return self.store.get_commit(id_or_prefix)
            except (ObjectNotFoundError, CorruptObjectError) as e:
                raise CommitNotFoundError(id_or_prefix) from e

        matches = [
            commit
            for commit in self.store.iter_commits()
            if commit.commit_id.startswith(id_or_prefix)
        ]
        if len(matches) != 1:
            self.log.debug(
                "Prefix {prefix} matched {count} commits",
                prefix=id_or_prefix,
                count=len(matches),
            )
            raise CommitNotFoundError(id_or_prefix)
        return matches[0]

    def ancestor_distances(self, commit_id: str) -> Dict[str, int]:
        """
        Minimum number of parent edges from ``commit_id`` to each ancestor.

        Every parent is followed, so both sides of a merge are included. The
        commit itself is at distance 0. Keys are in breadth-first order.
        """
        distances: Dict[str, int] = {commit_id: 0}
        queue = deque([commit_id])
        while queue:
            current = queue.popleft()
            for parent_id in self.get(current).parents:
                if parent_id not in distances:
                    distances[parent_id] = distances[current] + 1
                    queue.append(parent_id)
        return distances

    @performance_monitor(threshold_ms=500)
    def find_split_point(self, a: Commit, b: Commit) -> Commit:
        """
        Find the best common ancestor of two commits.

        Among the commits reachable from both, picks the one closest to ``b``;
        ties are broken by distance from ``a``, then by breadth-first order
        from ``a``. This is not a general lowest-common-ancestor search for
        histories with crossing merges.
        """
        from_a = self.ancestor_distances(a.commit_id)
        from_b = self.ancestor_distances(b.commit_id)

        best_id = None
        best_key = None
        for commit_id, distance_a in from_a.items():
            distance_b = from_b.get(commit_id)
            if distance_b is None:
                continue
            key = (distance_b, distance_a)
            if best_key is None or key < best_key:
                best_id, best_key = commit_id, key

        if best_id is None:
            # Every history starts at the same root commit
            raise CommitNotFoundError(f"{a.commit_id}..{b.commit_id}")

        self.log.debug(
            "Split point of {a} and {b} is {split}",
            a=a.commit_id[:7],
            b=b.commit_id[:7],
            split=best_id[:7],
        )
        return self.get(best_id)

    def history(self, commit: Commit) -> Iterator[Commit]:
        """Yield ``commit`` and its first-parent ancestors down to the root."""
        current = commit
        while True:
            yield current
            if current.is_root:
                return
            current = self.get(current.parents[0])

    def all_commits(self) -> List[Commit]:
        """Every commit in the store, in no particular order."""
        return list(self.store.iter_commits())
