import logging
import sys

def load_attributes(s: str, kv_sep: str = '=') -> dict:
    """
    splits a gff/gtf attribute column into a dict; keys are case-folded,
    pairs without a separator are ignored
    """
    return {
        k.strip().lower(): v.strip().strip('"')
        for x in s.strip().split(';') if kv_sep in x.strip()
        for k, v in [x.strip().split(kv_sep, 1)]
    }

def setup_logging(verbosity : int = 0):
    level = logging.INFO
    if verbosity > 0:
        level = logging.DEBUG
    elif verbosity < 0:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format='%(levelname)s [%(name)s] %(message)s'
    )
