"""
Description : Online template miner combining preprocessing, prefix tree routing and clustering
License     : MIT
"""
import logging
import threading
from typing import List, Tuple

import regex as re

from .cluster import ClusterListing, ClusterStore, absorb, fastMatch
from .config import MinerConfig
from .preprocess import Preprocessor
from .tree import ParseTree

logger = logging.getLogger(__name__)


class TemplateMiner:
    """
    Assigns each incoming log line to a cluster, creating or generalizing
    cluster templates as lines arrive.

    One lock guards a whole ``ingest`` call, so a miner may be shared between
    threads. Separate miners share no state.
    """

    def __init__(self, config: MinerConfig = None):
        self.config = config if config is not None else MinerConfig()
        self.preprocessor = Preprocessor(self.config.masking, self.config.extra_delimiters)
        self.tree = ParseTree(max_depth=self.config.max_depth,
                              max_children=self.config.max_children,
                              distinguishing=self.config.distinguishing,
                              placeholders=self.config.placeholders)
        self.store = ClusterStore()
        self._lock = threading.Lock()
        self._placeholder_re = re.compile(
            '(' + '|'.join(re.escape(p) for p in sorted(self.config.placeholders, key=lambda p: (-len(p), p))) + ')')

    def ingest(self, line: str) -> Tuple[int, bool]:
        with self._lock:
            cluster, change_type = self._ingest(line)
            return cluster.cluster_id, change_type == 'cluster_created'

    def add_log_message(self, line: str) -> dict:
        """Ingest ``line`` and report what changed, in the drain3 result shape."""
        with self._lock:
            cluster, change_type = self._ingest(line)
            return {
                'change_type': change_type,
                'cluster_id': cluster.cluster_id,
                'cluster_size': cluster.size,
                'template_mined': cluster.get_template(),
                'cluster_count': len(self.store),
            }

    def _ingest(self, line):
        # caller holds self._lock
        seq = self.preprocessor.preprocess(line)
        leaf = self.tree.route(seq)
        matchCluster = fastMatch(leaf.clusters, seq, self.config.sim_threshold)
        if matchCluster is None:
            return self.store.create_cluster(leaf, seq), 'cluster_created'
        if absorb(matchCluster, seq):
            logger.debug('Cluster %d template changed: %s',
                         matchCluster.cluster_id, matchCluster.get_template())
            return matchCluster, 'cluster_template_changed'
        return matchCluster, 'none'

    def list_clusters(self) -> ClusterListing:
        return ClusterListing(self.store, self._lock)

    def get_cluster(self, cluster_id: int):
        with self._lock:
            return self.store.snapshot(self.store.get(cluster_id))

    def get_parameter_list(self, cluster_id: int, line: str) -> List[str]:
        """
        Values ``line`` binds to the cluster's wildcards and to its masked
        spans, in order of appearance. Masked values are read back from the
        raw line, so a masking placeholder yields the text it replaced.
        """
        snap = self.get_cluster(cluster_id)
        if len(self.preprocessor.preprocess(line)) != len(snap.template):
            return []
        match = self._parameter_regex(snap).fullmatch(line)
        if match is None:
            return []
        return list(match.groups())

    def _parameter_regex(self, snap):
        sep = '(?:' + '|'.join([r'\s'] + [re.escape(d) for d in self.config.extra_delimiters]) + ')+'
        parts = []
        for i, token in enumerate(snap.template):
            if i in snap.wildcards:
                parts.append('(.+?)')
                continue
            pieces = self._placeholder_re.split(token)
            parts.append(''.join('(.+?)' if k % 2 else re.escape(piece) for k, piece in enumerate(pieces)))
        return re.compile('(?:%s)?' % sep + sep.join(parts) + '(?:%s)?' % sep, re.DOTALL)

    def __len__(self):
        with self._lock:
            return len(self.store)
