from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Iterator

from gfftab.base import GFeature, Rank

class ParentWindow(BaseModel):
    """
    Ancestor candidates that are still live at the current stream position,
    one bucket per rank from `floor` to `ceiling`, keyed by identifier
    (sequence name for regions).

    Features handed out by `lookup` belong to the window; callers must not
    keep them across a later `insert` or `prune`.
    """
    floor : int = Rank.TRANSCRIPT
    ceiling : int = Rank.REGION
    parents : List[Dict[str, GFeature]] = Field(default_factory=list)

    def __init__(self, **data):
        super().__init__(**data)
        if not self.parents:
            self.parents = [dict() for _ in range(self.floor, self.ceiling + 1)]

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self.parents)

    def live(self) -> Iterator[GFeature]:
        for bucket in self.parents:
            yield from bucket.values()

    def _bucket(self, rank : int) -> Optional[Dict[str, GFeature]]:
        i = rank - self.floor
        if i < 0 or i >= len(self.parents):
            return None
        return self.parents[i]

    def insert(self, feature : GFeature) -> Optional[GFeature]:
        """
        Registers a feature as a parent candidate; out-of-range ranks are ignored.
        Returns the live entry that shared its identifier and was displaced.
        """
        bucket = self._bucket(feature.rank)
        if bucket is None:
            return None
        key = feature.window_key
        displaced = bucket.get(key)
        bucket[key] = feature
        if displaced is feature:
            return None
        return displaced

    def prune(self, feature : GFeature) -> List[GFeature]:
        """
        drops and returns every entry that no longer overlaps `feature`
        """
        discarded = []
        for bucket in self.parents:
            stale = [k for k, f in bucket.items() if not f.overlaps(feature)]
            for k in stale:
                discarded.append(bucket.pop(k))
        return discarded

    def lookup(self, child : GFeature) -> Optional[GFeature]:
        # start one rank above the child so a feature never matches a same-rank namesake
        if child.paid is None:
            return None
        beg = max(child.rank + 1 - self.floor, 0)
        for bucket in self.parents[beg:]:
            if child.paid in bucket:
                return bucket[child.paid]
        return None

    def lookup_db_key(self, label : str, rank : int) -> int:
        bucket = self._bucket(rank)
        if bucket is None or label not in bucket:
            return 0
        return bucket[label].uid

    def drain(self) -> List[GFeature]:
        remaining = list(self.live())
        for bucket in self.parents:
            bucket.clear()
        return remaining
