"""
Description : Fixed depth prefix tree routing token sequences to candidate clusters
License     : MIT
"""
from enum import Enum

from .config import WILDCARD
from .preprocess import is_distinguishing


class NodeKind(Enum):
    ROOT = 0
    LENGTH = 1
    INTERNAL = 2
    LEAF = 3


# Key of the single leaf hanging under a length node when no token position is walked.
LEAF_KEY = None


class Node:
    def __init__(self, kind, key=None, depth=0):
        self.kind = kind
        self.key = key
        self.depth = depth
        self.childD = {}
        # literal children only, the wildcard branch excluded
        self.fanout = 0
        self.clusters = [] if kind is NodeKind.LEAF else None

    def __repr__(self):
        return f'Node({self.kind.name}, key={self.key!r}, depth={self.depth})'


class ParseTree:

    def __init__(self, max_depth=4, max_children=100, distinguishing='alpha', placeholders=frozenset((WILDCARD,))):
        self.max_depth = max_depth
        self.max_children = max_children
        self.distinguishing = distinguishing
        self.placeholders = placeholders
        self.root = Node(NodeKind.ROOT)

    def routing_key(self, token):
        if is_distinguishing(token, self.distinguishing, self.placeholders):
            return token
        return WILDCARD

    def route(self, seq):
        """Return the leaf for ``seq``, creating the nodes along its path on demand."""
        seqLen = len(seq)
        parentn = self.root.childD.get(seqLen)
        if parentn is None:
            parentn = Node(NodeKind.LENGTH, key=seqLen, depth=1)
            self.root.childD[seqLen] = parentn

        steps = min(self.max_depth, seqLen)
        if steps == 0:
            leaf = parentn.childD.get(LEAF_KEY)
            if leaf is None:
                leaf = Node(NodeKind.LEAF, key=LEAF_KEY, depth=2)
                parentn.childD[LEAF_KEY] = leaf
            return leaf

        for position in range(steps):
            kind = NodeKind.LEAF if position == steps - 1 else NodeKind.INTERNAL
            key = self.routing_key(seq[position])

            child = parentn.childD.get(key)
            if child is None:
                if key != WILDCARD and parentn.fanout >= self.max_children:
                    key = WILDCARD
                    child = parentn.childD.get(key)
                if child is None:
                    child = Node(kind, key=key, depth=parentn.depth + 1)
                    parentn.childD[key] = child
                    if key != WILDCARD:
                        parentn.fanout += 1
            parentn = child

        return parentn

    def leaves(self, node=None):
        node = node or self.root
        if node.kind is NodeKind.LEAF:
            yield node
            return
        for child in node.childD.values():
            yield from self.leaves(child)

    def format_tree(self, node=None, dep=0):
        node = node or self.root
        pStr = '\t' * dep
        if node.kind is NodeKind.ROOT:
            pStr += 'Root'
        elif node.kind is NodeKind.LENGTH:
            pStr += '<' + str(node.key) + '>'
        elif node.kind is NodeKind.LEAF:
            pStr += f'{node.key} ({len(node.clusters)} clusters)'
        else:
            pStr += str(node.key)

        lines = [pStr]
        for child in node.childD.values():
            lines.extend(self.format_tree(child, dep + 1))
        return lines
