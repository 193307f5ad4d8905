import logging
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

import pandas as pd

from gfftab.base import GFeature
from gfftab.config import GConfig
from gfftab.reader import load_features
from gfftab.resolver import HierarchyResolver, ResolverStats
from gfftab.tables import GTables, GTsvTables

logger = logging.getLogger(__name__)

class GSummary(BaseModel):
    n_lines : int = 0
    n_features : int = 0
    rows : Dict[str, int] = Field(default_factory=dict)
    stats : ResolverStats = Field(default_factory=ResolverStats)

    def __str__(self) -> str:
        s = f'obtained {self.n_features} features from a total of {self.n_lines} lines'
        for k, v in self.rows.items():
            s += f'\n\t{k}\t{v}'
        return s

class GDb(BaseModel):
    """
    Reads an annotation file and writes it out as linked tables.
    Features are sorted so that every parent is seen before its children,
    then resolved in a single pass; `load` must run before `build_db`.
    """
    file_name : str
    config : GConfig = Field(default_factory=GConfig)
    features : List[GFeature] = Field(default_factory=list)
    n_lines : int = 0
    summary : Optional[GSummary] = None

    def load(self):
        self.features, self.n_lines = load_features(self.file_name, self.config)
        return self

    def build_db(self, tables : GTables) -> GSummary:
        try:
            resolver = HierarchyResolver(tables=tables, config=self.config)
            resolver.resolve_all(self.features)
        finally:
            tables.close()
        self.summary = GSummary(
            n_lines = self.n_lines,
            n_features = len(self.features),
            rows = {self.config.table_names[k]: v for k, v in tables.n_rows.items()},
            stats = resolver.stats
        )
        if resolver.stats.orphans:
            logger.warning(f'{resolver.stats.orphans} features had no parent and were skipped')
        return self.summary

    def to_tsv(self, prefix : str) -> GSummary:
        self.load()
        return self.build_db(GTsvTables(prefix, self.config))

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        tables = GTables(self.config)
        self.load()
        self.build_db(tables)
        return tables.frames()
