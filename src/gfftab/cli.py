import argparse
import logging
import sys

from pydantic import ValidationError

from gfftab.base import GFormatError
from gfftab.config import GConfig, format_defaults
from gfftab.gdb import GDb
from gfftab.utils import setup_logging

logger = logging.getLogger(__name__)

def get_parser():
    parser = argparse.ArgumentParser(
        prog='gfftab',
        description='Convert a gff3/gtf annotation into linked tsv tables'
    )
    parser.add_argument('input', help='annotation file')
    parser.add_argument('prefix', help='output prefix; tables are written to <prefix>_<table>.tsv')
    parser.add_argument('--format', '-f', choices=['gff', 'gtf'], default='gff',
                        help='attribute syntax of the input (default: gff)')
    parser.add_argument('--config', '-c', help='json file overriding the default configuration')
    parser.add_argument('--header', action='store_true', help='write a header row to every table')
    parser.add_argument('--chunk-size', type=int, help='rows buffered per table before writing')
    parser.add_argument('--verbose', '-v', action='store_true')
    parser.add_argument('--quiet', '-q', action='store_true')
    return parser

def load_config(args) -> GConfig:
    overrides = {}
    if args.header:
        overrides['header'] = True
    if args.chunk_size:
        overrides['chunk_size'] = args.chunk_size
    if args.config:
        return GConfig.from_file(args.config, defaults=format_defaults(args.format), **overrides)
    return GConfig.for_format(args.format, **overrides)

def main(argv=None):
    args = get_parser().parse_args(argv)
    setup_logging(1 if args.verbose else -1 if args.quiet else 0)

    try:
        config = load_config(args)
    except (RuntimeError, ValidationError) as e:
        logger.error(f'invalid configuration : {e}')
        return 1

    try:
        with open(args.input):
            pass
    except OSError as e:
        logger.error(f'unable to open: {args.input} ({e.strerror})')
        return 1

    gdb = GDb(file_name=args.input, config=config)
    try:
        summary = gdb.to_tsv(args.prefix)
    except GFormatError as e:
        logger.error(f'unparseable input : {e}')
        return 1
    except UnicodeDecodeError as e:
        logger.error(f'{args.input} is not utf-8 text : {e.reason} at byte {e.start}')
        return 1
    except OSError as e:
        logger.error(f'{e.filename}: {e.strerror}')
        return 1

    logger.info(str(summary))
    return 0

if __name__ == '__main__':
    sys.exit(main())
