# workload.py
#
# Access generators. Each one is an iterable of (job_id, page_no) pairs; the
# engine pulls as many pairs as it needs.

import random
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from errors import InvalidConfig

Access = Tuple[int, int]


def uniform_accesses(pages_by_job: Dict[int, List[int]], seed: Optional[int] = None) -> Iterator[Access]:
    """Endless stream drawn uniformly over every (job, page) pair."""
    rng = random.Random(seed)
    pairs = [(job_id, page_no) for job_id in sorted(pages_by_job) for page_no in pages_by_job[job_id]]
    if not pairs:
        raise InvalidConfig("No pages to access")
    while True:
        yield rng.choice(pairs)


def job_then_page_accesses(pages_by_job: Dict[int, List[int]], seed: Optional[int] = None) -> Iterator[Access]:
    """
    Endless stream that picks a job uniformly, then one of its pages.

    Pages of small jobs come up more often than under uniform_accesses.
    """
    rng = random.Random(seed)
    job_ids = sorted(j for j, pages in pages_by_job.items() if pages)
    if not job_ids:
        raise InvalidConfig("No pages to access")
    while True:
        job_id = rng.choice(job_ids)
        yield job_id, rng.choice(pages_by_job[job_id])


def fixed_accesses(sequence: Sequence[Access]) -> Iterator[Access]:
    """Replay an explicit sequence once."""
    for job_id, page_no in sequence:
        yield int(job_id), int(page_no)


GENERATORS = {
    "uniform": uniform_accesses,
    "job": job_then_page_accesses,
}


def make_generator(strategy: str, pages_by_job: Dict[int, List[int]],
                   seed: Optional[int] = None) -> Iterator[Access]:
    if strategy not in GENERATORS:
        raise InvalidConfig(f"Unknown access strategy {strategy!r}")
    return GENERATORS[strategy](pages_by_job, seed)


def take(accesses: Iterable[Access], count: int) -> List[Access]:
    """Materialize the first count accesses, e.g. to replay them under another policy."""
    it = iter(accesses)
    result = []
    for _ in range(count):
        try:
            result.append(next(it))
        except StopIteration:
            break
    return result
