from pydantic import BaseModel, Field
from typing import Optional, Dict, Set, Tuple
from enum import IntEnum

class Rank(IntEnum):
    """
    lower rank = more specific feature; 0 is never a parent or a child
    """
    UNKNOWN = 0
    CDS = 1
    EXON = 2
    TRANSCRIPT = 3
    GENE = 4
    REGION = 5

class GFormatError(RuntimeError):
    pass

class GId(BaseModel):
    uid : int = 0 # surrogate key within the rank tier
    aid : Optional[str] = None
    paid : Optional[str] = None # parent_aid
    puid : int = 0 # parent_uid

class GFeature(BaseModel):
    chr : str
    src : str
    feature_type : str
    start : int
    end : Optional[int] # None -> unbounded
    score : Optional[float] = None
    strand : str = '.' # ['.', '-', '+']
    frame : Optional[int] = None # [None, 0, 1, 2]
    attribute_str : str = ''
    attributes : Dict[str, str] = Field(default_factory=dict)
    rank : Rank = Rank.UNKNOWN
    gid : GId = Field(default_factory=GId)
    child_count : int = 0
    exon_count : int = 0
    cds_count : int = 0
    annotation : Dict[int, Set[str]] = Field(default_factory=dict)

    def __repr__(self) -> str:
        return f"{self.feature_type}:{self.aid or ''}:{self.uid},{self.chr},{self.strand},{self.start}-{self._end_str()}"

    def _end_str(self):
        return '.' if self.end is None else str(self.end)

    @classmethod
    def placeholder_region(cls, chr : str, feature_type : str = 'region'):
        """
        stands in for a region that the input never declared; covers the whole sequence
        """
        return cls(
            chr = chr,
            src = '.',
            feature_type = feature_type,
            start = 0,
            end = None,
            strand = '+',
            rank = Rank.REGION,
            gid = GId(aid=chr)
        )

    @classmethod
    def derive(cls, other, feature_type : str, rank : Rank):
        """
        copies location, source and attributes of another feature under a new type
        """
        return cls(
            chr = other.chr,
            src = other.src,
            feature_type = feature_type,
            start = other.start,
            end = other.end,
            score = other.score,
            strand = other.strand,
            frame = other.frame,
            attributes = dict(other.attributes),
            rank = rank,
            gid = GId(aid=other.aid, paid=other.paid)
        )

    @property
    def window_key(self) -> str:
        # regions are looked up by sequence name
        return self.chr if self.rank == Rank.REGION else self.aid

    def sort_key(self) -> Tuple:
        """
        sequence, start, then end descending so that enclosing features come
        first, then rank descending so that at identical coordinates genes
        precede transcripts precede exons precede CDS
        """
        end = float('inf') if self.end is None else self.end
        return (
            self.chr, self.start, -end, -int(self.rank),
            self.strand, self.aid or '', self.paid or ''
        )

    def overlaps(self, other) -> bool:
        if self.chr != other.chr:
            return False
        s_end = float('inf') if self.end is None else self.end
        o_end = float('inf') if other.end is None else other.end
        return other.start <= s_end and o_end >= self.start

    def range_identical(self, other) -> bool:
        return (
            self.chr == other.chr and
            self.start == other.start and
            self.end == other.end and
            self.rank == other.rank and
            self.strand == other.strand
        )

    def count_child(self, child):
        inc = 1 if child.strand == '+' else -1
        self.child_count += inc
        if child.rank == Rank.EXON:
            self.exon_count += inc
        elif child.rank == Rank.CDS:
            self.cds_count += inc

    def child_ordinal(self, child) -> int:
        if child.rank == Rank.CDS:
            return self.cds_count
        if child.rank == Rank.EXON:
            return self.exon_count
        return self.child_count

    def add_annotation(self, other, fields : Dict[int, str]):
        for field, ak in fields.items():
            if ak in other.attributes:
                self.annotation.setdefault(field, set()).add(other.attributes[ak])

    def annotation_rows(self):
        for field in sorted(self.annotation):
            for value in sorted(self.annotation[field]):
                yield (self.uid, field, value)

    # getter, setter methods

    @property
    def uid(self):
        return self.gid.uid

    @uid.setter
    def uid(self, new_uid):
        self.gid.uid = new_uid

    @property
    def aid(self):
        return self.gid.aid

    @aid.setter
    def aid(self, new_aid):
        self.gid.aid = new_aid

    @property
    def paid(self):
        return self.gid.paid

    @paid.setter
    def paid(self, new_paid):
        self.gid.paid = new_paid

    @property
    def puid(self):
        return self.gid.puid

    @puid.setter
    def puid(self, new_puid):
        self.gid.puid = new_puid
