import logging
from typing import Dict, List

import pandas as pd

from gfftab.base import GFeature, Rank
from gfftab.config import GConfig, RANK_TABLES

logger = logging.getLogger(__name__)

FEATURE_COLUMNS = [
    'db_key', 'parent_key', 'region_key', 'feature_type', 'id', 'chr',
    'parent_id', 'src', 'start', 'end', 'strand', 'frame'
]
LINK_COLUMNS = ['parent_key', 'child_key', 'count', 'child_id']
ANNOTATION_COLUMNS = ['db_key', 'field', 'value']

LINK_TABLES = {
    Rank.EXON : 'tr_exon',
    Rank.CDS : 'tr_cds',
}

class GTables:
    """
    Collects output rows per table in memory. `frames` hands them back as
    pandas DataFrames; subclasses stream them somewhere else.
    """
    def __init__(self, config : GConfig = None):
        self.config = config or GConfig()
        self.columns = {}
        for key in RANK_TABLES.values():
            self.columns[key] = FEATURE_COLUMNS
        for key in LINK_TABLES.values():
            self.columns[key] = LINK_COLUMNS
        self.columns['annotation'] = ANNOTATION_COLUMNS
        self.rows : Dict[str, List[tuple]] = {key: [] for key in self.columns}
        self.n_rows : Dict[str, int] = {key: 0 for key in self.columns}

    def write_feature(self, feature : GFeature, region_key : int):
        self._append(RANK_TABLES[feature.rank], (
            feature.uid, feature.puid, region_key, feature.feature_type,
            feature.aid, feature.chr, feature.paid, feature.src,
            feature.start, feature.end, feature.strand, feature.frame
        ))

    def write_link(self, child : GFeature, parent_key : int, count : int):
        self._append(LINK_TABLES[child.rank], (parent_key, child.uid, count, child.aid))

    def write_annotation(self, feature : GFeature):
        for row in feature.annotation_rows():
            self._append('annotation', row)

    def _append(self, key : str, row : tuple):
        self.rows[key].append(row)
        self.n_rows[key] += 1

    def _frame(self, key : str) -> pd.DataFrame:
        # object dtype keeps ints as ints next to missing values
        return pd.DataFrame(self.rows[key], columns=self.columns[key], dtype=object)

    def frames(self) -> Dict[str, pd.DataFrame]:
        return {self.config.table_names[key]: self._frame(key) for key in self.columns}

    def close(self):
        pass

class GTsvTables(GTables):
    """
    Appends rows to `<prefix>_<table>.tsv` files, `chunk_size` rows at a time.
    """
    def __init__(self, prefix : str, config : GConfig = None):
        super().__init__(config)
        self.prefix = prefix
        self.file_names = {
            key: f'{prefix}_{self.config.table_names[key]}.tsv' for key in self.columns
        }
        self._started = set()
        self._handles = {}
        try:
            for key, file_name in self.file_names.items():
                self._handles[key] = open(file_name, 'w', newline='')
        except OSError:
            for fh in self._handles.values():
                fh.close()
            raise

    def _append(self, key : str, row : tuple):
        super()._append(key, row)
        if len(self.rows[key]) >= self.config.chunk_size:
            self._flush(key)

    def _flush(self, key : str):
        header = self.config.header and key not in self._started
        if self.rows[key] or header:
            self._frame(key).to_csv(
                self._handles[key], sep='\t', index=False, na_rep='.', header=header
            )
        self._started.add(key)
        self.rows[key] = []

    def frames(self) -> Dict[str, pd.DataFrame]:
        raise RuntimeError(f'rows have been written to {self.prefix}_*.tsv')

    def close(self):
        for key, fh in self._handles.items():
            if not fh.closed:
                self._flush(key)
                fh.close()
        logger.debug(f'closed {len(self._handles)} tables under {self.prefix}')
