"""
Demand-paging simulation engine.

One ``DemandPagingEngine`` owns every piece of state for a single run: the
page table, the frame table, the replacement policy, the counters, the trace
and the event log. Nothing is shared between engines, so two runs never
interfere and a run with a fixed seed (or fixed sequence) always ends in the
same state.
"""

# =============================================================================
# IMPORTS
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import SimulationConfig
from errors import InvalidConfig
from paging import (
    FrameTable,
    Page,
    PageKey,
    PageTable,
    check_consistency,
    divide_into_pages,
    internal_fragmentation,
)
from replacement import Policy, make_policy
from workload import Access, fixed_accesses, make_generator, take

logger = logging.getLogger(__name__)

HIT = "HIT"
FAULT = "FAULT"


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class AccessOutcome:
    """
    Result of a single access.

    Attributes:
        hit (bool): True if the page was already resident
        frame_no (int): Frame holding the page after the access
        evicted (Optional[PageKey]): Page pushed out to make room, if any
    """
    hit: bool
    frame_no: int
    evicted: Optional[PageKey] = None

    @property
    def outcome(self) -> str:
        return HIT if self.hit else FAULT


@dataclass(frozen=True)
class TraceEvent:
    """One line of the per-access trace."""
    access_index: int
    job_id: int
    page_no: int
    outcome: str
    frame_no: int
    evicted: Optional[PageKey] = None

    def describe(self) -> str:
        line = f"Access {self.access_index}: J{self.job_id} P{self.page_no} {self.outcome} -> F{self.frame_no}"
        if self.evicted is not None:
            line += f" (replaced J{self.evicted[0]} P{self.evicted[1]})"
        return line


@dataclass(frozen=True)
class SimulationStats:
    accesses: int
    hits: int
    faults: int
    fault_rate: float
    hit_rate: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "accesses": self.accesses,
            "hits": self.hits,
            "faults": self.faults,
            "fault_rate": round(self.fault_rate, 4),
            "hit_rate": round(self.hit_rate, 4),
        }


@dataclass
class SimulationResult:
    """
    Final output of a run: statistics plus exportable table snapshots.

    Attributes:
        policy (str): Name of the replacement policy used
        stats (SimulationStats): Access, hit and fault totals and rates
        trace (List[TraceEvent]): One event per access, in order
        frames (List[dict]): Frame table snapshot
        pages (List[dict]): Page table snapshot
        fragmentation (Dict[int, int]): Internal fragmentation per job
    """
    policy: str
    stats: SimulationStats
    trace: List[TraceEvent] = field(default_factory=list)
    frames: List[Dict[str, object]] = field(default_factory=list)
    pages: List[Dict[str, object]] = field(default_factory=list)
    fragmentation: Dict[int, int] = field(default_factory=dict)


# =============================================================================
# ENGINE
# =============================================================================

class DemandPagingEngine:
    """
    Core simulation engine for demand paging.

    Pages are loaded only when accessed. On a fault the engine first takes
    the lowest free frame; only when memory is full does it ask the policy
    for a victim.

    Attributes:
        config (SimulationConfig): Run configuration
        policy (Policy): Replacement policy deciding evictions
        page_table (PageTable): Entries for every page of every job
        frames (FrameTable): The physical frames
        pages (Dict[int, List[Page]]): Pages of each job, in order
        hits (int): Count of page hits
        faults (int): Count of page faults
        trace (List[TraceEvent]): Per-access trace
        event_log (List[str]): Human-readable log of every memory operation
    """

    def __init__(self, config: SimulationConfig, policy: Optional[Policy] = None,
                 accesses: Optional[Iterable[Access]] = None):
        self.config = config
        self.policy = policy if policy is not None else make_policy(config.policy)

        # Divide every job up front; entries live for the whole run
        self.page_table = PageTable()
        self.pages: Dict[int, List[Page]] = {}
        for job in config.jobs:
            pages, entries = divide_into_pages(job, config.page_size)
            self.pages[job.job_id] = pages
            self.page_table.register(entries)

        self.frames = FrameTable(config.frame_count, config.page_size)

        if accesses is None:
            accesses = make_generator(config.strategy, self.pages_by_job(), config.seed)
        self.accesses = iter(accesses)

        self.hits = 0
        self.faults = 0
        self.trace: List[TraceEvent] = []
        self.event_log: List[str] = []

    # =========================================================================
    # PAGING APIs
    # =========================================================================

    def handle_access(self, job_id: int, page_no: int) -> AccessOutcome:
        """
        Access one page, handling hits, faults and replacement.

        Args:
            job_id (int): Job owning the page
            page_no (int): Page number inside the job

        Returns:
            AccessOutcome: hit/fault, the frame now holding the page and the
            evicted page if there was one

        Raises:
            KeyNotFound: If the page was never registered
            InternalInconsistency: If the tables disagree (only checked when
                config.verify is set) or the policy misbehaves
        """
        pte = self.page_table.lookup(job_id, page_no)
        self.policy.on_access(self.page_table)

        # ----- PAGE HIT -----
        if pte.valid:
            self.hits += 1
            self.policy.on_hit(pte, pte.frame_no)
            self._log(f"Hit: J{job_id} P{page_no} in Frame {pte.frame_no}")
            return self._settle(job_id, page_no, AccessOutcome(True, pte.frame_no))

        # ----- PAGE FAULT -----
        self.faults += 1
        self._log(f"Fault: J{job_id} P{page_no} not in memory")

        evicted = None
        frame_no = self.frames.find_free()
        if frame_no is None:
            frame_no = self.policy.select_victim(self.frames, self.page_table)
            evicted = self.frames.evict(frame_no)
            old_pte = self.page_table.mark_evicted(evicted)
            self.policy.on_evict(old_pte, frame_no)
            self._log(f"Evicting: J{evicted[0]} P{evicted[1]} from Frame {frame_no}")

        self.frames.assign(frame_no, job_id, page_no)
        self.page_table.mark_resident((job_id, page_no), frame_no)
        self.policy.on_load(pte, frame_no)
        self._log(
            f"Loaded: J{job_id} P{page_no} -> Frame {frame_no}"
            + (" (replaced)" if evicted is not None else "")
        )
        return self._settle(job_id, page_no, AccessOutcome(False, frame_no, evicted))

    def step(self) -> Optional[AccessOutcome]:
        """Draw the next access from the generator and handle it; None when exhausted."""
        try:
            job_id, page_no = next(self.accesses)
        except StopIteration:
            return None
        return self.handle_access(job_id, page_no)

    def run(self, access_count: Optional[int] = None) -> SimulationResult:
        """
        Run the configured number of accesses and return the result.

        A finite access source that runs dry stops the loop early.

        Raises:
            InvalidConfig: If access_count is not positive
        """
        count = self.config.access_count if access_count is None else access_count
        if count <= 0:
            raise InvalidConfig(f"Access count must be positive, got {count}")
        for _ in range(count):
            if self.step() is None:
                logger.debug("access source exhausted after %d accesses", self.accesses_done)
                break
        return self.result()

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    @property
    def accesses_done(self) -> int:
        return self.hits + self.faults

    def pages_by_job(self) -> Dict[int, List[int]]:
        return {job_id: [p.page_no for p in pages] for job_id, pages in self.pages.items()}

    def fragmentation(self) -> Dict[int, int]:
        return {
            job_id: internal_fragmentation(pages, self.config.page_size)
            for job_id, pages in self.pages.items()
        }

    def check_consistency(self):
        check_consistency(self.frames, self.page_table)

    def stats(self) -> SimulationStats:
        """
        Totals and rates.

        Raises:
            InvalidConfig: If no access has been made yet
        """
        total = self.accesses_done
        if total == 0:
            raise InvalidConfig("No accesses simulated; rates are undefined")
        return SimulationStats(
            accesses=total,
            hits=self.hits,
            faults=self.faults,
            fault_rate=self.faults / total,
            hit_rate=self.hits / total,
        )

    def snapshot(self) -> Tuple[List[Dict[str, object]], List[Dict[str, object]]]:
        return self.frames.snapshot(), self.page_table.snapshot()

    def result(self) -> SimulationResult:
        frames, pages = self.snapshot()
        return SimulationResult(
            policy=self.policy.name,
            stats=self.stats(),
            trace=list(self.trace),
            frames=frames,
            pages=pages,
            fragmentation=self.fragmentation(),
        )

    def _settle(self, job_id: int, page_no: int, outcome: AccessOutcome) -> AccessOutcome:
        event = TraceEvent(
            access_index=self.accesses_done,
            job_id=job_id,
            page_no=page_no,
            outcome=outcome.outcome,
            frame_no=outcome.frame_no,
            evicted=outcome.evicted,
        )
        self.trace.append(event)
        logger.debug(event.describe())
        if self.config.verify:
            self.check_consistency()
        return outcome

    def _log(self, message: str):
        self.event_log.append(message)
        logger.debug(message)


# =============================================================================
# RUNNERS
# =============================================================================

def simulate(config: SimulationConfig, policy: Optional[str] = None,
             sequence: Optional[Sequence[Access]] = None) -> SimulationResult:
    """
    Build an engine and run it.

    Args:
        config (SimulationConfig): Run configuration
        policy (Optional[str]): Policy name overriding config.policy
        sequence (Optional[Sequence[Access]]): Fixed accesses to replay
            instead of the seeded generator; the run covers the whole sequence

    Raises:
        InvalidConfig: On an unknown policy or an empty sequence
    """
    chosen = make_policy(policy or config.policy)
    if sequence is None:
        return DemandPagingEngine(config, chosen).run()
    engine = DemandPagingEngine(config, chosen, accesses=fixed_accesses(sequence))
    return engine.run(len(sequence))


def compare_policies(config: SimulationConfig, names: Sequence[str] = ("FIFO", "LRU"),
                     sequence: Optional[Sequence[Access]] = None) -> Dict[str, SimulationResult]:
    """
    Run several policies against one and the same access sequence.

    When no sequence is given, config.access_count accesses are drawn once
    from the configured generator and replayed for every policy.
    """
    if sequence is None:
        probe = DemandPagingEngine(config)
        sequence = take(probe.accesses, config.access_count)
    return {name.upper(): simulate(config, name, sequence) for name in names}
