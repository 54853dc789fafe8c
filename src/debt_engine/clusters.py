"""Hidden coupling clusters: files that change together without importing each other."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Iterable, Sequence

from .scoring.models import CouplingPair

MAX_CLUSTERS = 5


@dataclass(frozen=True)
class CouplingCluster:
    files: tuple[str, ...]
    mean_coupling_ratio: float
    pair_count: int

    @property
    def size(self) -> int:
        return len(self.files)

    def to_dict(self) -> dict:
        return {
            "files": list(self.files),
            "size": self.size,
            "mean_coupling_ratio": round(self.mean_coupling_ratio, 4),
            "pair_count": self.pair_count,
        }


def hidden_pairs(pairs: Iterable[CouplingPair], min_ratio: float = 0.0) -> list[CouplingPair]:
    return [p for p in pairs if not p.has_import_link and p.coupling_ratio >= min_ratio]


def detect_clusters(
    pairs: Sequence[CouplingPair], min_ratio: float = 0.0, limit: int = MAX_CLUSTERS
) -> list[CouplingCluster]:
    """Connected components of the hidden-coupling graph.

    Only pairs without an import link become edges. Components of two or
    more files are returned, largest first, at most ``limit`` of them.
    """
    edges = hidden_pairs(pairs, min_ratio)
    adjacency: dict[str, set[str]] = defaultdict(set)
    for pair in edges:
        adjacency[pair.file_a].add(pair.file_b)
        adjacency[pair.file_b].add(pair.file_a)

    seen: set[str] = set()
    components: list[set[str]] = []
    for start in sorted(adjacency):
        if start in seen:
            continue
        component = {start}
        queue = deque([start])
        seen.add(start)
        while queue:
            node = queue.popleft()
            for neighbor in sorted(adjacency[node]):
                if neighbor not in seen:
                    seen.add(neighbor)
                    component.add(neighbor)
                    queue.append(neighbor)
        if len(component) >= 2:
            components.append(component)

    clusters = []
    for component in components:
        internal = [p for p in edges if p.file_a in component and p.file_b in component]
        mean = sum(p.coupling_ratio for p in internal) / len(internal) if internal else 0.0
        clusters.append(
            CouplingCluster(
                files=tuple(sorted(component)),
                mean_coupling_ratio=mean,
                pair_count=len(internal),
            )
        )

    clusters.sort(key=lambda c: (-c.size, -c.mean_coupling_ratio, c.files))
    return clusters[:limit]
