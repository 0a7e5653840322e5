from .cluster import ClusterSnapshot, Logcluster
from .config import WILDCARD, ConfigurationError, MaskingRule, MinerConfig, load_masking_rules
from .miner import TemplateMiner
from .parser import LogParser

__all__ = [
    'WILDCARD',
    'ClusterSnapshot',
    'ConfigurationError',
    'Logcluster',
    'LogParser',
    'MaskingRule',
    'MinerConfig',
    'TemplateMiner',
    'load_masking_rules',
]
