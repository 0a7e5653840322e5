"""
Description : Configuration of the template miner and masking rule loading
License     : MIT
"""
import json
from dataclasses import dataclass, field, fields
from typing import Mapping, Tuple

import regex as re

WILDCARD = '<*>'

DISTINGUISHING_POLICIES = ('alpha', 'no_digits', 'any')


class ConfigurationError(ValueError):
    """Raised when a miner is built from invalid settings."""


@dataclass(frozen=True)
class MaskingRule:
    """A regular expression whose matches are rewritten to ``placeholder``."""
    pattern: str
    placeholder: str = WILDCARD

    def __post_init__(self):
        if not isinstance(self.placeholder, str) or not self.placeholder:
            raise ConfigurationError('masking placeholder must be a non-empty string')
        try:
            compiled = re.compile(self.pattern)
        except (re.error, TypeError) as e:
            raise ConfigurationError(f'invalid masking pattern {self.pattern!r}: {e}') from e
        object.__setattr__(self, 'regex', compiled)


@dataclass(frozen=True)
class MinerConfig:
    """
    Attributes
    ----------
        max_depth : number of token positions used for routing below the length layer
        max_children : max number of literal children of a tree node
        sim_threshold : minimum similarity for a line to join an existing cluster
        masking : ordered masking rules applied before tokenization
        extra_delimiters : characters treated as whitespace when splitting
        distinguishing : which tokens may become routing keys ('alpha', 'no_digits', 'any')
    """
    max_depth: int = 4
    max_children: int = 100
    sim_threshold: float = 0.4
    masking: Tuple[MaskingRule, ...] = field(default_factory=tuple)
    extra_delimiters: Tuple[str, ...] = field(default_factory=tuple)
    distinguishing: str = 'alpha'

    def __post_init__(self):
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 0:
            raise ConfigurationError(f'max_depth must be an integer >= 0, got {self.max_depth!r}')
        if isinstance(self.max_children, bool) or not isinstance(self.max_children, int) or self.max_children < 1:
            raise ConfigurationError(f'max_children must be an integer >= 1, got {self.max_children!r}')
        if isinstance(self.sim_threshold, bool) or not isinstance(self.sim_threshold, (int, float)) \
                or not 0 < self.sim_threshold <= 1:
            raise ConfigurationError(f'sim_threshold must be in (0, 1], got {self.sim_threshold!r}')
        if self.distinguishing not in DISTINGUISHING_POLICIES:
            raise ConfigurationError(
                f'distinguishing must be one of {DISTINGUISHING_POLICIES}, got {self.distinguishing!r}')

        rules = []
        for rule in self.masking:
            if not isinstance(rule, MaskingRule):
                pattern, placeholder = rule
                rule = MaskingRule(pattern, placeholder)
            rules.append(rule)
        object.__setattr__(self, 'masking', tuple(rules))

        for delimiter in self.extra_delimiters:
            if not isinstance(delimiter, str) or not delimiter:
                raise ConfigurationError(f'extra delimiters must be non-empty strings, got {delimiter!r}')
        object.__setattr__(self, 'extra_delimiters', tuple(self.extra_delimiters))

    @property
    def placeholders(self):
        return frozenset(rule.placeholder for rule in self.masking) | {WILDCARD}

    @classmethod
    def from_dict(cls, settings: Mapping) -> 'MinerConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(settings) - known
        if unknown:
            raise ConfigurationError(f'unknown configuration keys: {sorted(unknown)}')
        return cls(**settings)


def _wrap_placeholder(mask_with):
    if mask_with.startswith('<') and mask_with.endswith('>'):
        return mask_with
    return '<' + mask_with + '>'


def load_masking_rules(path):
    """
    Load masking rules from a JSON file holding a list of
    ``{"regex_pattern": ..., "mask_with": ...}`` objects.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            entries = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f'malformed masking file {path}: {e}') from e

    if not isinstance(entries, list):
        raise ConfigurationError(f'masking file {path} must hold a JSON list')

    rules = []
    for entry in entries:
        try:
            pattern = entry['regex_pattern']
            mask_with = entry.get('mask_with', WILDCARD)
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError(f'malformed masking entry {entry!r} in {path}') from e
        rules.append(MaskingRule(pattern, _wrap_placeholder(str(mask_with))))
    return rules
