"""
Page replacement policies.

The engine handles every fault the same way and only asks a policy which
occupied frame to give up when no free frame is left. Policies also get
notified of hits and loads so they can keep their ordering state.
"""

from collections import deque
from typing import Deque, Dict, List, Type

from errors import InternalInconsistency, InvalidConfig
from paging import FrameTable, PageTable, PageTableEntry


class ReplacementPolicy:
    """
    Enumeration of available page replacement algorithms.

    FIFO:  First-In-First-Out - replaces the oldest loaded page
    LRU:   Least Recently Used - replaces the page not used for longest time
    AGING: 8-bit reference register approximation of LRU
    """
    FIFO = "FIFO"
    LRU = "LRU"
    AGING = "AGING"

    ALL = (FIFO, LRU, AGING)


class Policy:
    """Base class; subclasses override the hooks they need."""

    name = ""

    def select_victim(self, frames: FrameTable, page_table: PageTable) -> int:
        raise NotImplementedError

    def on_access(self, page_table: PageTable):
        pass

    def on_hit(self, pte: PageTableEntry, frame_no: int):
        pass

    def on_load(self, pte: PageTableEntry, frame_no: int):
        pass

    def on_evict(self, pte: PageTableEntry, frame_no: int):
        pass

    def queue(self) -> List[int]:
        """Current eviction order as frame numbers, for display."""
        return []

    def _require_victims(self, frames: FrameTable):
        if frames.find_free() is not None:
            raise InternalInconsistency(
                f"{self.name}: victim requested while frame {frames.find_free()} is free"
            )
        if not frames.occupied_frames():
            raise InternalInconsistency(f"{self.name}: no occupied frame to replace")

    def __repr__(self):
        return f"{type(self).__name__}()"


class FIFOPolicy(Policy):
    """Evict frames in the order they were loaded. Hits do not reorder."""

    name = ReplacementPolicy.FIFO

    def __init__(self):
        # frame indices in load order, oldest on the left
        self.fifo_queue: Deque[int] = deque()

    def select_victim(self, frames, page_table):
        self._require_victims(frames)
        if not self.fifo_queue:
            raise InternalInconsistency("FIFO queue is empty while every frame is busy")
        return self.fifo_queue.popleft()

    def on_load(self, pte, frame_no):
        self.fifo_queue.append(frame_no)

    def queue(self):
        return list(self.fifo_queue)


class LRUPolicy(Policy):
    """
    Exact LRU using a logical clock.

    Every hit and every load stamps the page with the next tick; the victim
    is the occupied frame whose page carries the smallest stamp, ties going
    to the lowest frame number.
    """

    name = ReplacementPolicy.LRU

    def __init__(self):
        self.time_counter = 0

    def _touch(self, pte):
        pte.last_used = self.time_counter
        self.time_counter += 1

    def on_hit(self, pte, frame_no):
        self._touch(pte)

    def on_load(self, pte, frame_no):
        self._touch(pte)

    def select_victim(self, frames, page_table):
        self._require_victims(frames)
        min_time = None
        victim_frame_no = None
        for f in frames.occupied_frames():
            pte = page_table.lookup(f.job_id, f.page_no)
            # strict < keeps the lowest frame number on ties
            if min_time is None or pte.last_used < min_time:
                min_time = pte.last_used
                victim_frame_no = f.frame_no
        return victim_frame_no


class AgingPolicy(Policy):
    """
    Approximate LRU with an 8-bit reference register per page.

    Before each access every resident page's register is shifted right one
    bit; a hit or a load sets the top bit. The page with the smallest
    register has gone longest without a reference, within an 8-access
    history.
    """

    name = ReplacementPolicy.AGING

    MSB = 0x80

    def on_access(self, page_table):
        for pte in page_table.resident_entries():
            pte.referenced >>= 1

    def on_hit(self, pte, frame_no):
        pte.referenced |= self.MSB

    def on_load(self, pte, frame_no):
        pte.referenced = self.MSB

    def on_evict(self, pte, frame_no):
        pte.referenced = 0

    def select_victim(self, frames, page_table):
        self._require_victims(frames)
        smallest = None
        victim_frame_no = None
        for f in frames.occupied_frames():
            ref = page_table.lookup(f.job_id, f.page_no).referenced
            if smallest is None or ref < smallest:
                smallest = ref
                victim_frame_no = f.frame_no
        return victim_frame_no


POLICIES: Dict[str, Type[Policy]] = {
    ReplacementPolicy.FIFO: FIFOPolicy,
    ReplacementPolicy.LRU: LRUPolicy,
    ReplacementPolicy.AGING: AgingPolicy,
}


def make_policy(name: str) -> Policy:
    """
    Build a fresh policy instance by name.

    Raises:
        InvalidConfig: If the name is not one of ReplacementPolicy.ALL
    """
    key = str(name).strip().upper()
    if key not in POLICIES:
        raise InvalidConfig(
            f"Unknown replacement policy {name!r}; choose from {', '.join(ReplacementPolicy.ALL)}"
        )
    return POLICIES[key]()
