"""
Paging data structures: jobs, pages, the page table and the frame table.

A job's address space is cut into fixed-size pages by ``divide_into_pages``.
Every page gets a ``PageTableEntry`` keyed by the composite ``(job_id, page_no)``
pair, and physical memory is a fixed ``FrameTable`` whose entries only ever
change occupant. The two tables must always agree:

    frame.occupied  <=>  page_table[(frame.job_id, frame.page_no)] is valid
                         and points back at frame.frame_no
"""

# =============================================================================
# IMPORTS
# =============================================================================

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from errors import InternalInconsistency, InvalidConfig, KeyNotFound

PageKey = Tuple[int, int]  # (job_id, page_no)


# =============================================================================
# DATA MODEL
# =============================================================================

@dataclass(frozen=True)
class Job:
    """
    A job (process image) that is paged into memory.

    Attributes:
        job_id (int): Identifier of the job, unique within one simulation
        size (int): Size of the job's address space in bytes (K in the UI)
    """
    job_id: int
    size: int


@dataclass(frozen=True)
class Page:
    """
    One page of a job. Only the last page of a job may be smaller than the
    configured page size.
    """
    job_id: int
    page_no: int
    size: int

    @property
    def key(self) -> PageKey:
        return (self.job_id, self.page_no)


@dataclass
class PageTableEntry:
    """
    Represents a single entry in the Page Table.

    Each page of each job has exactly one entry, created when the job is
    divided into pages, that tracks:
    - Which physical frame it maps to (if any)
    - Whether the page is currently in RAM (valid bit)
    - Recency information used by the replacement policies

    Attributes:
        job_id (int): Job owning this page
        page_no (int): Page number inside the job
        frame_no (Optional[int]): Physical frame number, None if not in memory
        valid (bool): True if page is currently loaded in RAM
        last_used (int): Logical time of last touch (exact LRU)
        referenced (int): 8-bit aging register (approximate LRU)
    """
    job_id: int
    page_no: int
    frame_no: Optional[int] = None
    valid: bool = False
    last_used: int = 0
    referenced: int = 0

    @property
    def key(self) -> PageKey:
        return (self.job_id, self.page_no)


@dataclass
class Frame:
    """
    Represents a physical memory frame in RAM.

    Frames never move or resize; only the page loaded into them changes.

    Attributes:
        frame_no (int): The frame's index in physical memory
        start (int): Starting physical address (frame_no * page_size)
        size (int): Frame size, always equal to the page size
        occupied (bool): True if a page is currently loaded here
        job_id (Optional[int]): Job owning the loaded page, None if free
        page_no (Optional[int]): The page stored here, None if free
    """
    frame_no: int
    start: int
    size: int
    occupied: bool = False
    job_id: Optional[int] = None
    page_no: Optional[int] = None

    @property
    def occupant(self) -> Optional[PageKey]:
        if not self.occupied:
            return None
        return (self.job_id, self.page_no)


# =============================================================================
# PAGINATOR
# =============================================================================

def divide_into_pages(job: Job, page_size: int) -> Tuple[List[Page], Dict[PageKey, PageTableEntry]]:
    """
    Split a job into pages and build its initial page table entries.

    The job yields ceil(size / page_size) pages. The last page holds the
    remainder when the size is not a multiple of the page size; a zero-size
    page is never produced. All entries start out invalid.

    Args:
        job (Job): The job to divide
        page_size (int): Configured page size

    Returns:
        Tuple[List[Page], Dict[PageKey, PageTableEntry]]: pages in order and
        the entries keyed by (job_id, page_no)

    Raises:
        InvalidConfig: If page_size or job.size is not positive
    """
    if page_size <= 0:
        raise InvalidConfig(f"Page size must be positive, got {page_size}")
    if job.size <= 0:
        raise InvalidConfig(f"Job {job.job_id} size must be positive, got {job.size}")

    full_pages, remainder = divmod(job.size, page_size)
    pages = [Page(job.job_id, i, page_size) for i in range(full_pages)]
    if remainder:
        pages.append(Page(job.job_id, full_pages, remainder))

    entries = {p.key: PageTableEntry(p.job_id, p.page_no) for p in pages}
    return pages, entries


def internal_fragmentation(pages: List[Page], page_size: int) -> int:
    """Unused bytes in the last page of a job (0 when it is full)."""
    if not pages:
        return 0
    return page_size - pages[-1].size


# =============================================================================
# FRAME TABLE
# =============================================================================

class FrameTable:
    """
    Fixed-size registry of physical frames.

    Frame numbers are positional (0..frame_count-1) and stable for the
    lifetime of the table.
    """

    def __init__(self, frame_count: int, page_size: int):
        if frame_count <= 0:
            raise InvalidConfig(f"Frame count must be positive, got {frame_count}")
        if page_size <= 0:
            raise InvalidConfig(f"Page size must be positive, got {page_size}")
        self.page_size = page_size
        self.frames: List[Frame] = [
            Frame(i, i * page_size, page_size) for i in range(frame_count)
        ]

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.frames)

    def frame(self, frame_no: int) -> Frame:
        if not 0 <= frame_no < len(self.frames):
            raise InternalInconsistency(f"Frame {frame_no} does not exist")
        return self.frames[frame_no]

    def find_free(self) -> Optional[int]:
        """Return the lowest-numbered free frame, or None if memory is full."""
        return next((f.frame_no for f in self.frames if not f.occupied), None)

    def assign(self, frame_no: int, job_id: int, page_no: int):
        frame = self.frame(frame_no)
        if frame.occupied:
            raise InternalInconsistency(
                f"Frame {frame_no} already holds J{frame.job_id} P{frame.page_no}"
            )
        frame.occupied = True
        frame.job_id = job_id
        frame.page_no = page_no

    def evict(self, frame_no: int) -> PageKey:
        """
        Clear a frame and return its previous occupant.

        The caller is responsible for invalidating the evicted page table entry.
        """
        frame = self.frame(frame_no)
        if not frame.occupied:
            raise InternalInconsistency(f"Cannot evict free frame {frame_no}")
        occupant = (frame.job_id, frame.page_no)
        frame.occupied = False
        frame.job_id = None
        frame.page_no = None
        return occupant

    def occupied_frames(self) -> List[Frame]:
        return [f for f in self.frames if f.occupied]

    def snapshot(self) -> List[Dict[str, object]]:
        return [
            {
                "frame": f.frame_no,
                "start": f.start,
                "busy": f.occupied,
                "job": f.job_id,
                "page": f.page_no,
            }
            for f in self.frames
        ]


# =============================================================================
# PAGE TABLE
# =============================================================================

class PageTable:
    """
    One merged page table for all jobs, keyed by (job_id, page_no).

    Entries are registered once when jobs are divided and are never removed;
    only their valid bit and frame number toggle.
    """

    def __init__(self):
        self.entries: Dict[PageKey, PageTableEntry] = {}

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key) -> bool:
        return key in self.entries

    def register(self, entries: Dict[PageKey, PageTableEntry]):
        for key, pte in entries.items():
            if key in self.entries:
                raise InvalidConfig(f"Page J{key[0]} P{key[1]} registered twice")
            self.entries[key] = pte

    def lookup(self, job_id: int, page_no: int) -> PageTableEntry:
        try:
            return self.entries[(job_id, page_no)]
        except KeyError:
            raise KeyNotFound(f"No page table entry for J{job_id} P{page_no}") from None

    def mark_resident(self, key: PageKey, frame_no: int) -> PageTableEntry:
        pte = self.lookup(*key)
        pte.frame_no = frame_no
        pte.valid = True
        return pte

    def mark_evicted(self, key: PageKey) -> PageTableEntry:
        pte = self.lookup(*key)
        pte.frame_no = None
        pte.valid = False
        return pte

    def keys(self) -> List[PageKey]:
        return sorted(self.entries)

    def pages_of(self, job_id: int) -> List[PageTableEntry]:
        return [pte for key, pte in sorted(self.entries.items()) if key[0] == job_id]

    def resident_entries(self) -> Iterable[PageTableEntry]:
        return (pte for pte in self.entries.values() if pte.valid)

    def snapshot(self) -> List[Dict[str, object]]:
        return [
            {
                "job": pte.job_id,
                "page": pte.page_no,
                "valid": pte.valid,
                "frame": pte.frame_no,
                "last_used": pte.last_used,
                "referenced": pte.referenced,
            }
            for _, pte in sorted(self.entries.items())
        ]


def check_consistency(frames: FrameTable, page_table: PageTable):
    """
    Verify that the frame table and page table agree in both directions.

    Raises:
        InternalInconsistency: On the first disagreement found
    """
    for frame in frames:
        if not frame.occupied:
            if frame.job_id is not None or frame.page_no is not None:
                raise InternalInconsistency(f"Free frame {frame.frame_no} still names an occupant")
            continue
        key = (frame.job_id, frame.page_no)
        if key not in page_table:
            raise InternalInconsistency(f"Frame {frame.frame_no} holds unknown page {key}")
        pte = page_table.lookup(*key)
        if not pte.valid or pte.frame_no != frame.frame_no:
            raise InternalInconsistency(
                f"Frame {frame.frame_no} holds J{key[0]} P{key[1]} but its entry says "
                f"valid={pte.valid} frame={pte.frame_no}"
            )

    for pte in page_table.entries.values():
        if pte.valid != (pte.frame_no is not None):
            raise InternalInconsistency(
                f"Entry J{pte.job_id} P{pte.page_no} valid={pte.valid} frame={pte.frame_no}"
            )
        if pte.valid and frames.frame(pte.frame_no).occupant != pte.key:
            raise InternalInconsistency(
                f"Entry J{pte.job_id} P{pte.page_no} points at frame {pte.frame_no} "
                f"which holds {frames.frame(pte.frame_no).occupant}"
            )
