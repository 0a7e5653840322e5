"""
Description : Log clusters, their similarity matching and template generalization
License     : MIT
"""
import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple

from .config import WILDCARD

logger = logging.getLogger(__name__)


class Logcluster:
    """
    A template is the token list of the first line, plus the set of positions
    generalized since. Token text never marks a wildcard by itself: a literal
    ``<*>`` token in the input stays a literal.
    """

    def __init__(self, cluster_id, logTemplate):
        self.cluster_id = cluster_id
        self.logTemplate = list(logTemplate)
        self.wildcards = frozenset()
        self.size = 1

    def rendered(self):
        return [WILDCARD if i in self.wildcards else token for i, token in enumerate(self.logTemplate)]

    def get_template(self):
        return ' '.join(self.rendered())

    def wildcard_positions(self):
        return sorted(self.wildcards)

    def __repr__(self):
        return f'Logcluster(id={self.cluster_id}, size={self.size}, template={self.get_template()!r})'


@dataclass(frozen=True)
class ClusterSnapshot:
    """Read-only view of a cluster at the time it was listed."""
    id: int
    template: Tuple[str, ...]
    match_count: int
    wildcards: FrozenSet[int] = frozenset()

    def get_template(self):
        return ' '.join(self.template)

    def to_dict(self):
        return {'id': self.id, 'template': list(self.template), 'match_count': self.match_count}


def seqDist(template: Sequence[str], seq: Sequence[str], wildcards=frozenset()) -> float:
    """Fraction of non-wildcard positions of ``template`` holding the same token as ``seq``."""
    assert len(template) == len(seq)
    if not seq:
        return 1.0

    simTokens = 0
    for i, (token1, token2) in enumerate(zip(template, seq)):
        if i not in wildcards and token1 == token2:
            simTokens += 1

    return simTokens / len(seq)


def fastMatch(logClustL: List[Logcluster], seq: Sequence[str], st: float) -> Optional[Logcluster]:
    """Best scoring cluster of a leaf, or None when it scores below ``st``.

    Clusters are visited in creation order and only a strictly higher score
    replaces the current best, so the earliest cluster wins ties.
    """
    maxSim = -1.0
    maxClust = None

    for logClust in logClustL:
        curSim = seqDist(logClust.logTemplate, seq, logClust.wildcards)
        if curSim > maxSim:
            maxSim = curSim
            maxClust = logClust

    if maxClust is not None and maxSim >= st:
        return maxClust
    return None


def getTemplate(template: Sequence[str], seq: Sequence[str], wildcards=frozenset()) -> FrozenSet[int]:
    """Wildcard positions covering both ``template`` and ``seq``."""
    assert len(template) == len(seq)
    retVal = set(wildcards)
    for i, (word, token) in enumerate(zip(template, seq)):
        if word != token:
            retVal.add(i)
    return frozenset(retVal)


def absorb(logClust: Logcluster, seq: Sequence[str]) -> bool:
    """Fold ``seq`` into the cluster; return whether its template changed."""
    newWildcards = getTemplate(logClust.logTemplate, seq, logClust.wildcards)
    logClust.size += 1
    if newWildcards != logClust.wildcards:
        logClust.wildcards = newWildcards
        return True
    return False


class ClusterStore:
    """Owns every cluster of a miner and hands out ids starting at 1."""

    def __init__(self):
        self._clusters: List[Logcluster] = []

    def __len__(self):
        return len(self._clusters)

    def create_cluster(self, leaf, seq) -> Logcluster:
        newCluster = Logcluster(len(self._clusters) + 1, seq)
        self._clusters.append(newCluster)
        leaf.clusters.append(newCluster)
        logger.debug('Created cluster %d: %s', newCluster.cluster_id, newCluster.get_template())
        return newCluster

    def get(self, cluster_id: int) -> Logcluster:
        if isinstance(cluster_id, bool) or not isinstance(cluster_id, int) \
                or not 1 <= cluster_id <= len(self._clusters):
            raise KeyError(cluster_id)
        return self._clusters[cluster_id - 1]

    def at(self, index: int) -> Logcluster:
        return self._clusters[index]

    @staticmethod
    def snapshot(logClust: Logcluster) -> ClusterSnapshot:
        return ClusterSnapshot(logClust.cluster_id, tuple(logClust.rendered()), logClust.size, logClust.wildcards)


class ClusterListing:
    """Restartable iterable over cluster snapshots in ascending id order.

    Snapshots are taken lazily, one at a time, under ``lock``. Clusters created
    while iterating are included since the store only ever appends.
    """

    def __init__(self, store: ClusterStore, lock):
        self._store = store
        self._lock = lock

    def __iter__(self) -> Iterator[ClusterSnapshot]:
        index = 0
        while True:
            with self._lock:
                if index >= len(self._store):
                    return
                snap = self._store.snapshot(self._store.at(index))
            yield snap
            index += 1

    def __len__(self):
        with self._lock:
            return len(self._store)
