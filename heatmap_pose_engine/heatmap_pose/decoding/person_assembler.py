# heatmap_pose_engine/heatmap_pose/decoding/person_assembler.py
import logging
from typing import Dict, List, Optional
from ..common.enums import MergeConflictPolicy
from ..common.models import Human, Keypoint
from ..common.skeleton import BODY_PARTS
from .affinity_matcher import PartPair
from .peak_extractor import Peak

logger = logging.getLogger(__name__)


class _PersonRecord:
    """An in-progress person: at most one peak per part."""

    def __init__(self, order: int):
        self.order = order
        self.peaks: Dict[int, Peak] = {}

    @property
    def total_score(self) -> float:
        return sum(peak.score for peak in self.peaks.values())

    def has_part(self, peak: Peak) -> bool:
        return peak.part.channel in self.peaks

    def add(self, peak: Peak):
        self.peaks[peak.part.channel] = peak

    def remove(self, peak: Peak):
        del self.peaks[peak.part.channel]

    def to_human(self) -> Human:
        keypoints = []
        for part in BODY_PARTS:
            peak = self.peaks.get(part.channel)
            if peak is None:
                keypoints.append(None)
            else:
                keypoints.append(Keypoint(part=part, x=peak.x, y=peak.y, score=peak.score))
        return Human(keypoints=tuple(keypoints))


class PersonAssembler:
    """
    Groups accepted part pairs into people.

    Pairs are consumed in the order the matcher produced them. A pair whose
    peaks are both unowned starts a new person; a pair with one owned peak
    extends that person unless the person already has a peak for the other
    part; a pair joining two different people merges them unless they share a
    part, in which case `merge_conflict_policy` decides.
    """

    def __init__(self, max_human_number: Optional[int] = None,
                 merge_conflict_policy: MergeConflictPolicy = MergeConflictPolicy.KEEP_SEPARATE):
        if max_human_number is not None and max_human_number < 1:
            raise ValueError(f"max_human_number must be >= 1, got {max_human_number}")
        self.max_human_number = max_human_number
        self.merge_conflict_policy = merge_conflict_policy

    def assemble(self, pairs: List[PartPair]) -> List[Human]:
        records: List[_PersonRecord] = []
        owners: Dict[tuple, _PersonRecord] = {}

        for pair in pairs:
            peak_a, peak_b = pair.peak_a, pair.peak_b
            record_a, record_b = owners.get(peak_a.key), owners.get(peak_b.key)

            if record_a is None and record_b is None:
                record = _PersonRecord(order=len(records))
                for peak in (peak_a, peak_b):
                    record.add(peak)
                    owners[peak.key] = record
                records.append(record)
            elif record_a is None or record_b is None:
                record = record_a or record_b
                loose = peak_b if record_b is None else peak_a
                if record.has_part(loose):
                    continue
                record.add(loose)
                owners[loose.key] = record
            elif record_a is not record_b:
                self._join(record_a, record_b, peak_a, peak_b, owners)

        survivors = [record for record in records if record.peaks]
        kept = self._apply_cap(survivors)
        logger.debug("Assembled %d people from %d pairs, kept %d", len(survivors), len(pairs), len(kept))
        return [record.to_human() for record in kept]

    def _join(self, record_a: _PersonRecord, record_b: _PersonRecord,
              peak_a: Peak, peak_b: Peak, owners: Dict[tuple, _PersonRecord]):
        if not (record_a.peaks.keys() & record_b.peaks.keys()):
            keep, absorb = sorted((record_a, record_b), key=lambda r: r.order)
            for peak in absorb.peaks.values():
                keep.add(peak)
                owners[peak.key] = keep
            absorb.peaks.clear()
            return

        if self.merge_conflict_policy is MergeConflictPolicy.KEEP_SEPARATE:
            return

        # REASSIGN: the stronger person takes the linking peak from the weaker one.
        if (record_a.total_score, -record_a.order) >= (record_b.total_score, -record_b.order):
            stronger, weaker, linking = record_a, record_b, peak_b
        else:
            stronger, weaker, linking = record_b, record_a, peak_a
        if stronger.has_part(linking):
            return
        weaker.remove(linking)
        stronger.add(linking)
        owners[linking.key] = stronger

    def _apply_cap(self, records: List[_PersonRecord]) -> List[_PersonRecord]:
        if self.max_human_number is None or len(records) <= self.max_human_number:
            return records
        ranked = sorted(records, key=lambda r: (-r.total_score, r.order))
        kept_orders = {record.order for record in ranked[:self.max_human_number]}
        return [record for record in records if record.order in kept_orders]
