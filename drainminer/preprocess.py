"""
Description : Masking and tokenization of raw log lines
License     : MIT
"""
import regex as re

from .config import WILDCARD

_alpha_lead_re = re.compile(r'^\p{L}')
_digit_re = re.compile(r'\d')


class Preprocessor:

    def __init__(self, masking=(), extra_delimiters=()):
        self.masking = tuple(masking)
        self.extra_delimiters = tuple(extra_delimiters)

    def mask(self, line):
        """
        Rewrite every span matched by a masking rule into the rule's placeholder.

        The line is scanned left to right: the earliest match among all rules
        wins, and on equal start the rule listed first wins. Masked spans never
        overlap and replaced text is not scanned again.
        """
        if not self.masking or not line:
            return line

        pieces = []
        pos = 0
        end = len(line)
        while pos <= end:
            best = None
            for rule in self.masking:
                m = self._search_non_empty(rule.regex, line, pos)
                if m is not None and (best is None or m.start() < best[0].start()):
                    best = (m, rule)
            if best is None:
                break
            m, rule = best
            pieces.append(line[pos:m.start()])
            pieces.append(rule.placeholder)
            pos = m.end()
        pieces.append(line[pos:])
        return ''.join(pieces)

    @staticmethod
    def _search_non_empty(regex, line, pos):
        while pos <= len(line):
            m = regex.search(line, pos)
            if m is None:
                return None
            if m.end() > m.start():
                return m
            pos = m.start() + 1
        return None

    def tokenize(self, line):
        for delimiter in self.extra_delimiters:
            line = line.replace(delimiter, ' ')
        return line.split()

    def preprocess(self, line):
        return self.tokenize(self.mask(line))


def is_distinguishing(token, policy='alpha', placeholders=frozenset((WILDCARD,))):
    """Whether ``token`` may be used as a literal routing key in the parse tree."""
    if token in placeholders:
        return False
    if policy == 'alpha':
        return _alpha_lead_re.match(token) is not None
    if policy == 'no_digits':
        return _digit_re.search(token) is None
    return True
