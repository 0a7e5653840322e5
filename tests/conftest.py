"""Test fixtures for drainminer."""
from pathlib import Path
from typing import List

import pytest

from drainminer import MinerConfig, TemplateMiner


@pytest.fixture
def miner() -> TemplateMiner:
    """Miner configured like the connection scenario."""
    return TemplateMiner(MinerConfig(max_depth=4, max_children=100, sim_threshold=0.5))


@pytest.fixture
def ssh_lines() -> List[str]:
    """OpenSSH style message contents."""
    return [
        'Invalid user webmaster from 173.234.31.186',
        'input_userauth_request: invalid user webmaster [preauth]',
        'pam_unix(sshd:auth): check pass; user unknown',
        'Failed password for invalid user webmaster from 173.234.31.186 port 38926 ssh2',
        'Received disconnect from 173.234.31.186: 11: Bye Bye [preauth]',
        'Invalid user test9 from 52.80.34.196',
        'input_userauth_request: invalid user test9 [preauth]',
        'pam_unix(sshd:auth): check pass; user unknown',
        'Failed password for invalid user test9 from 52.80.34.196 port 36060 ssh2',
        'Received disconnect from 52.80.34.196: 11: Bye Bye [preauth]',
        'Connection closed by 5.36.59.76 [preauth]',
        'Connection closed by 187.141.143.180 [preauth]',
    ]


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    """Small log file with a header before the message content."""
    path = tmp_path / 'app.log'
    path.write_text(
        '081109 203518 INFO: Connection from 10.0.0.1 port 22\n'
        '081109 203519 INFO: Connection from 10.0.0.2 port 23\n'
        '081109 203520 WARN: Disk 1 almost full\n'
        '081109 203521 WARN: Disk 2 almost full\n'
        'garbage line without header\n'
        '081109 203522 INFO: Connection from 10.0.0.3 port 24\n'
    )
    return path
