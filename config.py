# config.py

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from errors import InvalidConfig
from paging import Job
from replacement import ReplacementPolicy

# Defaults used by the UI sidebar
DEFAULT_PAGE_SIZE = 4
DEFAULT_FRAME_COUNT = 4
DEFAULT_ACCESS_COUNT = 20
DEFAULT_JOB_SIZES = (10, 12, 7)

STRATEGIES = ("uniform", "job")


def make_jobs(jobs: Sequence[Union[Job, int]]) -> List[Job]:
    """Accept Job objects or bare sizes; bare sizes get ids 0..n-1."""
    result = []
    for i, j in enumerate(jobs):
        result.append(j if isinstance(j, Job) else Job(i, int(j)))
    return result


@dataclass
class SimulationConfig:
    """
    Everything needed to build one simulation run.

    Attributes:
        page_size (int): Size of every page and frame
        jobs (List[Job]): Jobs to divide into pages (Job objects or sizes)
        frame_count (int): Number of physical frames
        access_count (int): Number of accesses the run draws
        policy (str): Replacement policy name (FIFO, LRU or AGING)
        seed (Optional[int]): Seed of the access generator, None for entropy
        verify (bool): Check table consistency after every access
        strategy (str): "uniform" over all (job, page) pairs, or "job" to pick
            a job first and then one of its pages
    """
    page_size: int
    jobs: List[Job]
    frame_count: int
    access_count: int
    policy: str = ReplacementPolicy.FIFO
    seed: Optional[int] = None
    verify: bool = False
    strategy: str = "uniform"

    def __post_init__(self):
        self.jobs = make_jobs(self.jobs)
        self.policy = str(self.policy).strip().upper()
        self.validate()

    def validate(self):
        if self.page_size <= 0:
            raise InvalidConfig(f"Page size must be positive, got {self.page_size}")
        if self.frame_count <= 0:
            raise InvalidConfig(f"Frame count must be positive, got {self.frame_count}")
        if self.access_count <= 0:
            raise InvalidConfig(f"Access count must be positive, got {self.access_count}")
        if not self.jobs:
            raise InvalidConfig("At least one job is required")
        seen = set()
        for job in self.jobs:
            if job.size <= 0:
                raise InvalidConfig(f"Job {job.job_id} size must be positive, got {job.size}")
            if job.job_id in seen:
                raise InvalidConfig(f"Duplicate job id {job.job_id}")
            seen.add(job.job_id)
        if self.policy not in ReplacementPolicy.ALL:
            raise InvalidConfig(f"Unknown replacement policy {self.policy!r}")
        if self.strategy not in STRATEGIES:
            raise InvalidConfig(f"Unknown access strategy {self.strategy!r}")


def parse_sequence(text: str) -> List[Tuple[int, int]]:
    """
    Parse an access sequence typed as "job:page" pairs.

    Entries are separated by commas or whitespace, e.g. "0:0, 0:1, 1:0".

    Raises:
        InvalidConfig: On a malformed entry
    """
    pairs = []
    for raw in text.replace(",", " ").split():
        job_str, sep, page_str = raw.partition(":")
        if not sep:
            raise InvalidConfig(f"Expected job:page, got {raw!r}")
        try:
            pairs.append((int(job_str), int(page_str)))
        except ValueError:
            raise InvalidConfig(f"Expected job:page integers, got {raw!r}") from None
    return pairs
