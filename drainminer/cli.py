"""
Commands:
    drainminer LOGFILE   mine templates from a log file and print the clusters
"""
import argparse
import json
import logging
import sys
import time

from .config import ConfigurationError, MaskingRule, MinerConfig, load_masking_rules, DISTINGUISHING_POLICIES
from .miner import TemplateMiner
from .parser import extract_content, read_lines

logger = logging.getLogger(__name__)


def _mask_arg(value):
    pattern, sep, placeholder = value.rpartition('=')
    if not sep or not pattern:
        raise argparse.ArgumentTypeError(f'expected PATTERN=PLACEHOLDER, got {value!r}')
    return pattern, placeholder


def build_arg_parser():
    parser = argparse.ArgumentParser(prog='drainminer', formatter_class=argparse.RawDescriptionHelpFormatter,
                                     description='Mine log templates from a log file.')
    parser.add_argument('log_file', type=str)
    parser.add_argument('--max-depth', type=int, default=4, help='routing depth below the length layer')
    parser.add_argument('--st', type=float, default=0.4, help='similarity threshold in (0, 1]')
    parser.add_argument('--max-children', type=int, default=100)
    parser.add_argument('--mask', type=_mask_arg, action='append', default=[], metavar='PATTERN=PLACEHOLDER')
    parser.add_argument('--masking-file', type=str, default=None)
    parser.add_argument('--delimiter', action='append', default=[], help='extra token delimiter')
    parser.add_argument('--distinguishing', choices=DISTINGUISHING_POLICIES, default='alpha')
    after = parser.add_mutually_exclusive_group()
    after.add_argument('--parse-after-col', type=int, default=0)
    after.add_argument('--parse-after-str', type=str, default='')
    parser.add_argument('--from-line', type=int, default=0)
    parser.add_argument('--follow', action='store_true', help='keep reading lines appended to the file')
    parser.add_argument('--output', choices=['text', 'json'], default='text')
    parser.add_argument('--print-tree', action='store_true')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def build_config(args):
    masking = [MaskingRule(pattern, placeholder) for pattern, placeholder in args.mask]
    if args.masking_file:
        masking.extend(load_masking_rules(args.masking_file))
    return MinerConfig.from_dict({
        'max_depth': args.max_depth,
        'max_children': args.max_children,
        'sim_threshold': args.st,
        'masking': tuple(masking),
        'extra_delimiters': tuple(args.delimiter),
        'distinguishing': args.distinguishing,
    })


def drain(miner, lines, parse_after_col=0, parse_after_str='', verbose=False):
    lineCounter = 0
    start = time.time()
    for line in lines:
        lineCounter += 1
        miner.ingest(extract_content(line, parse_after_col, parse_after_str))
        if verbose and lineCounter % 10000 == 0:
            logger.info('%4d clusters so far', len(miner))
    logger.info('---- Done processing file. Total of %d lines, done in %.2fs, %d clusters',
                lineCounter, time.time() - start, len(miner))
    return lineCounter


def print_clusters(miner, output='text', out=None):
    out = out or sys.stdout
    clusters = sorted(miner.list_clusters(), key=lambda snap: snap.match_count, reverse=True)
    if output == 'json':
        json.dump([snap.to_dict() for snap in clusters], out, indent=2, ensure_ascii=False)
        out.write('\n')
        return
    for snap in clusters:
        out.write(f'ID={snap.id:<5} : size={snap.match_count:<10}: {snap.get_template()}\n')


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        config = build_config(args)
    except (ConfigurationError, OSError) as e:
        logger.error('Invalid configuration: %s', e)
        return 2

    miner = TemplateMiner(config)
    try:
        drain(miner, read_lines(args.log_file, from_line=args.from_line, follow=args.follow),
              args.parse_after_col, args.parse_after_str, args.verbose)
    except FileNotFoundError:
        logger.error('Log file not found: %s', args.log_file)
        return 1
    except KeyboardInterrupt:
        logger.info('Interrupted, %d clusters', len(miner))

    print_clusters(miner, args.output)
    if args.print_tree:
        print('\n'.join(miner.tree.format_tree()))
    return 0


if __name__ == '__main__':
    sys.exit(main())
