"""Tests for access generators and display helpers."""

from itertools import islice

from utils import FREE_COLOR, frame_label, get_color
from workload import fixed_accesses, job_then_page_accesses, take, uniform_accesses

PAGES = {0: [0, 1, 2], 1: [0], 2: [0, 1]}


class TestGenerators:
    """Verify access streams stay inside the known pages and are seedable."""

    def test_uniform_stays_in_range(self) -> None:
        """Every drawn pair is a registered page."""
        for job_id, page_no in islice(uniform_accesses(PAGES, seed=5), 500):
            assert page_no in PAGES[job_id]

    def test_job_then_page_stays_in_range(self) -> None:
        """Every drawn pair is a registered page."""
        for job_id, page_no in islice(job_then_page_accesses(PAGES, seed=5), 500):
            assert page_no in PAGES[job_id]

    def test_same_seed_same_stream(self) -> None:
        """A seed fixes the stream."""
        assert take(uniform_accesses(PAGES, 9), 50) == take(uniform_accesses(PAGES, 9), 50)

    def test_fixed_replays_once(self) -> None:
        """A fixed sequence ends after its last pair."""
        assert take(fixed_accesses([(0, 1), (2, 0)]), 10) == [(0, 1), (2, 0)]


class TestDisplayHelpers:
    """Verify frame labels and colors."""

    def test_free_frame(self) -> None:
        """Free frames are gray and labelled Free."""
        frame = {"frame": 2, "busy": False, "job": None, "page": None}
        assert frame_label(frame) == "F2: Free"
        assert get_color(None) == FREE_COLOR

    def test_busy_frame(self) -> None:
        """Busy frames name their page and get a stable color per job."""
        frame = {"frame": 0, "busy": True, "job": 1, "page": 3}
        assert frame_label(frame) == "F0: J1 P3"
        assert get_color(1) == get_color(1) != get_color(2)
