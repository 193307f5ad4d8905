import logging
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Iterable, List

from gfftab.base import GFeature, Rank
from gfftab.config import GConfig
from gfftab.tables import GTables
from gfftab.window import ParentWindow

logger = logging.getLogger(__name__)

class ResolverStats(BaseModel):
    regions_synthesized : int = 0
    transcripts_synthesized : int = 0
    repeats : int = 0
    orphans : int = 0
    collisions : int = 0

class HierarchyResolver(BaseModel):
    """
    Streams sorted features into the output tables, one at a time.

    For every feature the window is pruned to the ancestors that still overlap
    it, the enclosing region and nearest parent are resolved (and made up when
    the input lacks them), and a surrogate key is handed out per rank tier.
    Consecutive exons or CDS with identical coordinates share a single key.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tables : GTables
    config : GConfig = Field(default_factory=GConfig)
    window : ParentWindow = Field(default_factory=ParentWindow)
    db_keys : Dict[int, int] = Field(default_factory=lambda: {int(r): 0 for r in Rank if r})
    last_emitted : Dict[int, GFeature] = Field(default_factory=dict)
    stats : ResolverStats = Field(default_factory=ResolverStats)

    def _next_key(self, rank : Rank) -> int:
        self.db_keys[rank] += 1
        return self.db_keys[rank]

    def _flush(self, features : List[GFeature]):
        for f in features:
            if f.annotation:
                self.tables.write_annotation(f)

    def _register(self, feature : GFeature):
        displaced = self.window.insert(feature)
        if displaced is not None:
            logger.debug(f'{displaced!r} displaced by {feature!r}')
            self.stats.collisions += 1
            self._flush([displaced])

    def _emit(self, feature : GFeature, region_key : int):
        feature.uid = self._next_key(feature.rank)
        self.tables.write_feature(feature, region_key)
        if feature.rank < Rank.TRANSCRIPT:
            self.last_emitted[feature.rank] = feature

    def _emit_region(self, region : GFeature):
        region.uid = self._next_key(Rank.REGION)
        self.tables.write_feature(region, region.uid)
        self._register(region)

    def _is_repeat(self, feature : GFeature) -> bool:
        if feature.rank >= Rank.TRANSCRIPT:
            return False
        prev = self.last_emitted.get(feature.rank)
        return prev is not None and feature.range_identical(prev)

    def _region_key(self, feature : GFeature) -> int:
        region_key = self.window.lookup_db_key(feature.chr, Rank.REGION)
        if region_key:
            return region_key
        region = GFeature.placeholder_region(feature.chr, feature_type=self.config.region_type)
        self._emit_region(region)
        self.stats.regions_synthesized += 1
        return region.uid

    def resolve(self, feature : GFeature):
        repeated = self._is_repeat(feature)
        self._flush(self.window.prune(feature))

        if feature.rank == Rank.REGION:
            self._emit_region(feature)
            return

        region_key = self._region_key(feature)

        parent = self.window.lookup(feature)
        if parent is None and feature.rank <= Rank.TRANSCRIPT:
            logger.warning(f'no parent found for feature: {feature.aid}\n\t{feature.attribute_str}')
            self.stats.orphans += 1
            return
        feature.puid = parent.uid if parent is not None else 0

        # exon or CDS hanging directly off a gene: put a transcript in between
        if parent is not None and feature.rank < Rank.TRANSCRIPT and parent.rank == Rank.GENE:
            rna = GFeature.derive(feature, self.config.transcript_type, Rank.TRANSCRIPT)
            rna.puid = parent.uid
            self._emit(rna, region_key)
            self._register(rna)
            self.stats.transcripts_synthesized += 1
            parent = rna
            feature.puid = rna.uid

        if parent is not None:
            parent.count_child(feature)

        if repeated:
            feature.uid = self.last_emitted[feature.rank].uid
            self.stats.repeats += 1
        else:
            self._emit(feature, region_key)
            if feature.rank >= Rank.TRANSCRIPT:
                self._register(feature)

        fields = self.config.annotation_fields
        if feature.rank < Rank.TRANSCRIPT:
            self.tables.write_link(feature, parent.uid, parent.child_ordinal(feature))
            parent.add_annotation(feature, fields)
        elif feature.rank == Rank.TRANSCRIPT:
            feature.add_annotation(feature, fields)

    def resolve_all(self, features : Iterable[GFeature]):
        for f in features:
            self.resolve(f)
        self.finish()

    def finish(self):
        # ancestors still live at the end of the stream were never pruned
        self._flush(self.window.drain())
