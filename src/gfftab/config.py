from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from gfftab.base import Rank

FEATURE_RANKS = {
    'cds' : Rank.CDS,
    'exon' : Rank.EXON,
    'mrna' : Rank.TRANSCRIPT,
    'lnc_rna' : Rank.TRANSCRIPT,
    'ncrna' : Rank.TRANSCRIPT,
    'trna' : Rank.TRANSCRIPT,
    'rrna' : Rank.TRANSCRIPT,
    'snrna' : Rank.TRANSCRIPT,
    'snorna' : Rank.TRANSCRIPT,
    'mirna' : Rank.TRANSCRIPT,
    'primary_transcript' : Rank.TRANSCRIPT,
    'transcript' : Rank.TRANSCRIPT,
    'rna' : Rank.TRANSCRIPT,
    'gene' : Rank.GENE,
    'pseudogene' : Rank.GENE,
    'region' : Rank.REGION,
}

# field index -> attribute key
ANNOTATION_FIELDS = {
    1 : 'name',
    2 : 'description',
    3 : 'product',
}

RANK_TABLES = {
    Rank.CDS : 'cds',
    Rank.EXON : 'exon',
    Rank.TRANSCRIPT : 'rna',
    Rank.GENE : 'gene',
    Rank.REGION : 'region',
}

TABLE_NAMES = {
    'cds' : 'cds',
    'exon' : 'exon',
    'rna' : 'rna',
    'gene' : 'gene',
    'region' : 'region',
    'tr_exon' : 'tr_exon',
    'tr_cds' : 'tr_cds',
    'annotation' : 'tr_annotation',
}

# gtf carries no ID/Parent; identity comes from the per-level *_id attributes
GTF_ID_KEYS = {
    Rank.GENE : ['gene_id'],
    Rank.TRANSCRIPT : ['transcript_id'],
    Rank.EXON : ['exon_id', 'transcript_id'],
    Rank.CDS : ['protein_id', 'transcript_id'],
}
GTF_PARENT_KEYS = {
    Rank.TRANSCRIPT : 'gene_id',
    Rank.EXON : 'transcript_id',
    Rank.CDS : 'transcript_id',
}

def format_defaults(file_fmt : str) -> dict:
    if file_fmt.lower() == 'gtf':
        return {
            'kv_sep' : ' ',
            'id_keys' : {int(k): list(v) for k, v in GTF_ID_KEYS.items()},
            'parent_keys' : {int(k): v for k, v in GTF_PARENT_KEYS.items()},
        }
    if file_fmt.lower() in ('gff', 'gff3'):
        return {}
    raise ValueError(f'unsupported annotation format : {file_fmt}')

class GConfig(BaseModel):
    iak : str = 'id'
    pak : str = 'parent'
    # per-rank overrides of iak / pak; the first id key present wins
    id_keys : Dict[int, List[str]] = Field(default_factory=dict)
    parent_keys : Dict[int, str] = Field(default_factory=dict)
    kv_sep : str = '='
    region_type : str = 'region'
    transcript_type : str = 'rna'
    feature_ranks : Dict[str, Rank] = Field(default_factory=lambda: dict(FEATURE_RANKS))
    annotation_fields : Dict[int, str] = Field(default_factory=lambda: dict(ANNOTATION_FIELDS))
    table_names : Dict[str, str] = Field(default_factory=lambda: dict(TABLE_NAMES))
    header : bool = False
    chunk_size : int = Field(default=10000, gt=0)

    @field_validator('feature_ranks')
    @classmethod
    def _fold_feature_types(cls, v):
        return {k.lower(): r for k, r in v.items()}

    def rank_of(self, feature_type : str) -> Rank:
        return self.feature_ranks.get(feature_type.lower(), Rank.UNKNOWN)

    def id_keys_for(self, rank : Rank) -> List[str]:
        return [k.lower() for k in self.id_keys.get(int(rank), [self.iak])]

    def parent_key_for(self, rank : Rank) -> Optional[str]:
        if int(rank) in self.parent_keys:
            return self.parent_keys[int(rank)].lower()
        return self.pak.lower()

    def table_for_rank(self, rank : Rank) -> str:
        return self.table_names[RANK_TABLES[rank]]

    @classmethod
    def for_format(cls, file_fmt : str, **kwargs):
        """
        gtf attributes are `key "value"` pairs keyed by gene_id/transcript_id;
        gff3 uses ID=/Parent=
        """
        return cls(**{**format_defaults(file_fmt), **kwargs})

    @classmethod
    def from_file(cls, file_path : str, defaults : Optional[dict] = None, **kwargs):
        """
        values in the file win over `defaults`; keyword arguments win over both
        """
        try:
            with open(file_path) as fh:
                data = cls.model_validate_json(fh.read()).model_dump(exclude_unset=True)
        except OSError as e:
            raise RuntimeError(f"error while loading {file_path} : {e}")
        return cls(**{**(defaults or {}), **data, **kwargs})
