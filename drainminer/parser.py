"""
Description : Parses a log file with the template miner and writes structured results
License     : MIT
"""
import logging
import os
import time
from datetime import datetime

import pandas as pd
import regex as re

from .config import MinerConfig
from .miner import TemplateMiner

logger = logging.getLogger(__name__)


def read_lines(path, from_line=0, follow=False, poll_interval=0.5, encoding='utf-8'):
    """
    Yield the lines of ``path`` without their line terminator, skipping the
    first ``from_line`` lines. With ``follow`` the file is polled for appended
    lines until the consumer stops iterating.
    """
    with open(path, 'r', encoding=encoding, errors='replace') as fin:
        lineno = 0
        pending = ''
        while True:
            chunk = fin.readline()
            if not chunk:
                if not follow:
                    break
                time.sleep(poll_interval)
                continue
            if not chunk.endswith('\n'):
                if follow:
                    # partial line, wait for the writer to finish it
                    pending += chunk
                    continue
            else:
                chunk = chunk[:-1]
            line = pending + chunk
            pending = ''
            lineno += 1
            if lineno > from_line:
                yield line.rstrip('\r')


def extract_content(line, parse_after_col=0, parse_after_str=''):
    """Strip a fixed-width prefix, or everything up to a marker, from ``line``."""
    if parse_after_col > 0:
        return line[parse_after_col:]
    if parse_after_str:
        idx = line.find(parse_after_str)
        if idx >= 0:
            return line[idx + len(parse_after_str):]
    return line


class LogParser:

    def __init__(self, log_format='<Content>', indir='./', outdir='./result/', depth=4, st=0.4,
                 maxChild=100, rex=(), keep_para=True, extra_delimiters=(), distinguishing='alpha',
                 parse_after_col=0, parse_after_str='', config=None):
        """
        Attributes
        ----------
            log_format : format of a log line, e.g. '<Date> <Time> <Level>: <Content>'
            indir : the input directory holding the raw log file
            outdir : the output directory for the structured results
            depth : depth of all leaf nodes, root and length layers included
            st : similarity threshold
            maxChild : max number of children of an internal node
            rex : regular expressions (or (pattern, placeholder) pairs) masked before tokenization
            keep_para : whether to write the ParameterList column
            parse_after_col : drop this many leading characters of the content
            parse_after_str : drop the content up to and including this marker
            config : a ready MinerConfig, overriding depth, st, maxChild, rex,
                     extra_delimiters and distinguishing
        """
        self.path = indir
        self.savePath = outdir
        self.log_format = log_format
        self.keep_para = keep_para
        self.parse_after_col = parse_after_col
        self.parse_after_str = parse_after_str
        self.logName = None
        self.df_log = None

        if config is None:
            masking = [r if isinstance(r, (tuple, list)) else (r, '<*>') for r in rex]
            config = MinerConfig(max_depth=max(depth - 2, 0), max_children=maxChild, sim_threshold=st,
                                 masking=masking, extra_delimiters=tuple(extra_delimiters),
                                 distinguishing=distinguishing)
        self.config = config
        self.miner = TemplateMiner(config)

    def parse(self, logName):
        logger.info('Parsing file: %s', os.path.join(self.path, logName))
        start_time = datetime.now()
        self.logName = logName
        self.miner = TemplateMiner(self.config)

        self.load_data()

        eventIds = []
        total = len(self.df_log)
        for count, content in enumerate(self.df_log['Content'], 1):
            content = extract_content(content, self.parse_after_col, self.parse_after_str)
            cluster_id, _ = self.miner.ingest(content)
            eventIds.append(cluster_id)

            if count % 10000 == 0 or count == total:
                logger.info('Processed %.1f%% of log lines, %d clusters so far.',
                            count * 100.0 / total, len(self.miner))

        if not os.path.exists(self.savePath):
            os.makedirs(self.savePath)

        self.outputResult(eventIds)
        logger.info('Parsing done. [Time taken: %s]', datetime.now() - start_time)
        return self.df_log

    def outputResult(self, eventIds):
        templates = {snap.id: snap for snap in self.miner.list_clusters()}

        self.df_log['EventId'] = ['E' + str(cid) for cid in eventIds]
        self.df_log['EventTemplate'] = [templates[cid].get_template() for cid in eventIds]
        if self.keep_para:
            self.df_log['ParameterList'] = [
                self.miner.get_parameter_list(cid, extract_content(content, self.parse_after_col,
                                                                   self.parse_after_str))
                for cid, content in zip(eventIds, self.df_log['Content'])
            ]
        self.df_log.to_csv(os.path.join(self.savePath, self.logName + '_structured.csv'), index=False)

        df_event = pd.DataFrame(
            [['E' + str(snap.id), snap.get_template(), snap.match_count] for snap in templates.values()],
            columns=['EventId', 'EventTemplate', 'Occurrences'])
        df_event.to_csv(os.path.join(self.savePath, self.logName + '_templates.csv'), index=False)

    def load_data(self):
        headers, regex = self.generate_logformat_regex(self.log_format)
        self.df_log = self.log_to_dataframe(os.path.join(self.path, self.logName), regex, headers)

    def log_to_dataframe(self, log_file, regex, headers):
        """ Function to transform log file to dataframe
        """
        log_messages = []
        skipped = 0
        for line in read_lines(log_file):
            match = regex.search(line.strip())
            if match is None:
                skipped += 1
                continue
            log_messages.append([match.group(header) for header in headers])
        logdf = pd.DataFrame(log_messages, columns=headers)
        logdf.insert(0, 'LineId', range(1, len(logdf) + 1))
        if skipped:
            logger.warning('Skipped %d lines not matching the log format', skipped)
        logger.info('Total lines: %d', len(logdf))
        return logdf

    @staticmethod
    def generate_logformat_regex(logformat):
        """ Function to generate regular expression to split log messages
        """
        headers = []
        splitters = re.split(r'(<[^<>]+>)', logformat)
        regex = ''
        for k in range(len(splitters)):
            if k % 2 == 0:
                splitter = re.sub(' +', r'\\s+', splitters[k])
                regex += splitter
            else:
                header = splitters[k].strip('<').strip('>')
                regex += '(?P<%s>.*?)' % header
                headers.append(header)
        regex = re.compile('^' + regex + '$')
        return headers, regex
