import logging
from itertools import groupby
from typing import Iterable, List, Optional, Tuple

from gfftab.base import GFeature, GFormatError, GId, Rank
from gfftab.config import GConfig
from gfftab.utils import load_attributes

logger = logging.getLogger(__name__)

HDR = [
    'chr', 'src', 'feature_type', 'start',
    'end', 'score', 'strand', 'frame', 'attributes'
]
N_FIELDS = len(HDR)
# anything shorter cannot hold 9 non-empty tab separated fields
MIN_LINE_LENGTH = N_FIELDS * 2

def _to_coord(x : str, name : str) -> int:
    v = int(x)
    if v < 0:
        raise ValueError(f'negative {name} : {x}')
    return v

def _to_row(fields : List[str]) -> dict:
    row = dict(zip(HDR, fields))
    row['start'] = _to_coord(row['start'], 'start')
    row['end'] = _to_coord(row['end'], 'end')
    row['score'] = None if row['score'] == '.' else float(row['score'])
    row['frame'] = None if row['frame'] == '.' else int(row['frame'])
    row['strand'] = row['strand'][:1] or '.'
    return row

def parse_line(line : str, config : GConfig, lineno : Optional[int] = None) -> Optional[GFeature]:
    """
    Turns one annotation line into a GFeature.

    Returns None for comments, short or malformed lines, unknown feature types and
    records without an identifier. Raises GFormatError when a numeric column cannot
    be parsed.
    """
    line = line.rstrip('\r\n')
    if len(line) < MIN_LINE_LENGTH or line.startswith('#'):
        return None
    fields = line.split('\t')
    if len(fields) < N_FIELDS:
        logger.debug(f'line {lineno}: expected {N_FIELDS} fields, got {len(fields)}')
        return None
    try:
        row = _to_row(fields[:N_FIELDS])
    except ValueError as e:
        raise GFormatError(f'line {lineno}: {e}\n\t{line}') from e

    feature_type = row['feature_type'].lower()
    rank = config.rank_of(feature_type)
    attributes = load_attributes(row['attributes'], kv_sep=config.kv_sep)
    if rank == Rank.UNKNOWN:
        logger.debug(f'line {lineno}: unknown feature type {feature_type}')
        return None
    iaks = config.id_keys_for(rank)
    aid = next((attributes[k] for k in iaks if k in attributes), None)
    if rank == Rank.REGION:
        aid = row['chr']
    elif aid is None:
        logger.warning(f'no {"/".join(iaks)} attribute set for: {row["attributes"]}')
        return None
    pak = config.parent_key_for(rank)
    return GFeature(
        chr = row['chr'],
        src = row['src'],
        feature_type = feature_type,
        start = row['start'],
        end = row['end'],
        score = row['score'],
        strand = row['strand'],
        frame = row['frame'],
        attribute_str = row['attributes'],
        attributes = attributes,
        rank = rank,
        gid = GId(aid=aid, paid=attributes.get(pak) if pak else None)
    )

def read_features(lines : Iterable[str], config : GConfig) -> Tuple[List[GFeature], int]:
    """
    parses every line and returns the valid features in processing order,
    together with the number of lines read
    """
    features = []
    n_lines = 0
    for n_lines, line in enumerate(lines, start=1):
        f = parse_line(line, config, lineno=n_lines)
        if f is not None:
            features.append(f)
    features.sort(key=GFeature.sort_key)
    # records that compare equal on every ordering field are one record
    unique = [next(group) for _, group in groupby(features, key=GFeature.sort_key)]
    if len(unique) < len(features):
        logger.debug(f'dropped {len(features) - len(unique)} duplicate records')
    return unique, n_lines

def load_features(file_name : str, config : GConfig) -> Tuple[List[GFeature], int]:
    with open(file_name, encoding='utf-8') as fh:
        features, n_lines = read_features(fh, config)
    logger.debug(f'obtained {len(features)} features from a total of {n_lines} lines')
    return features, n_lines
