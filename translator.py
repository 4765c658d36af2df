"""
Logical-to-physical address translation and static paging.

In static paging every page of a job is loaded before it runs, so every
translation resolves. In demand paging a page may be absent and
``resolve_physical`` raises ``PageNotResident``; the engine's
``handle_access`` is the path that loads it.
"""

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from errors import InvalidConfig, PageNotResident
from paging import FrameTable, Job, PageTable, divide_into_pages


@dataclass(frozen=True)
class Translation:
    """
    A resolved address.

    Attributes:
        address (int): Logical address inside the job
        page_no (int): Page number (address // page_size)
        offset (int): Offset inside the page (address % page_size)
        frame_no (int): Frame holding the page
        physical (int): Frame start + offset
    """
    address: int
    page_no: int
    offset: int
    frame_no: int
    physical: int


def translate(logical_address: int, page_size: int) -> Tuple[int, int]:
    """Split a logical address into (page_no, offset)."""
    if page_size <= 0:
        raise InvalidConfig(f"Page size must be positive, got {page_size}")
    if logical_address < 0:
        raise InvalidConfig(f"Address must not be negative, got {logical_address}")
    return divmod(logical_address, page_size)


def resolve_physical(page_table: PageTable, frames: FrameTable,
                     job_id: int, page_no: int, offset: int) -> int:
    """
    Physical address of an offset inside a resident page.

    Raises:
        KeyNotFound: If the page was never registered
        PageNotResident: If the page is not loaded in any frame
        InvalidConfig: If the offset falls outside the page
    """
    if not 0 <= offset < frames.page_size:
        raise InvalidConfig(f"Offset {offset} outside page of size {frames.page_size}")
    pte = page_table.lookup(job_id, page_no)
    if not pte.valid:
        raise PageNotResident(f"J{job_id} P{page_no} is not in memory")
    return frames.frame(pte.frame_no).start + offset


class StaticPager:
    """
    Static paging of a single job.

    Memory gets one frame more than the job has pages, and every page is
    placed into a frame in a seeded random order before any translation.
    """

    def __init__(self, job: Job, page_size: int, seed: Optional[int] = None):
        self.job = job
        self.page_size = page_size
        self.rng = random.Random(seed)

        self.pages, entries = divide_into_pages(job, page_size)
        self.page_table = PageTable()
        self.page_table.register(entries)
        self.frames = FrameTable(len(self.pages) + 1, page_size)
        self._load_all()

    def _load_all(self):
        order = [p.page_no for p in self.pages]
        self.rng.shuffle(order)
        # frames fill from 0 upward in shuffled page order
        for frame_no, page_no in enumerate(order):
            self.frames.assign(frame_no, self.job.job_id, page_no)
            self.page_table.mark_resident((self.job.job_id, page_no), frame_no)

    def translate_address(self, address: int) -> Translation:
        """
        Translate a logical address of the job.

        Raises:
            InvalidConfig: If the address is outside the job
        """
        if not 0 <= address < self.job.size:
            raise InvalidConfig(f"Address {address} outside job of size {self.job.size}")
        page_no, offset = translate(address, self.page_size)
        physical = resolve_physical(self.page_table, self.frames, self.job.job_id, page_no, offset)
        frame_no = self.page_table.lookup(self.job.job_id, page_no).frame_no
        return Translation(address, page_no, offset, frame_no, physical)

    def random_addresses(self, count: int = 3) -> List[Translation]:
        return [self.translate_address(self.rng.randrange(self.job.size)) for _ in range(count)]
