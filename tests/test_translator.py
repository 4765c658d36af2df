"""Tests for address translation and static paging."""

import pytest

from config import SimulationConfig
from engine import DemandPagingEngine
from errors import InvalidConfig, PageNotResident
from paging import Job
from translator import StaticPager, resolve_physical, translate


class TestTranslate:
    """Verify the page / offset split."""

    def test_split(self) -> None:
        """Address 9 with 4-byte pages is page 2, offset 1."""
        assert translate(9, 4) == (2, 1)
        assert translate(0, 4) == (0, 0)

    def test_negative_address_rejected(self) -> None:
        """Negative addresses are invalid."""
        with pytest.raises(InvalidConfig):
            translate(-1, 4)


class TestResolvePhysical:
    """Verify physical addresses against the demand-paging tables."""

    def _engine(self):
        config = SimulationConfig(page_size=4, jobs=[12], frame_count=2, access_count=1, seed=0)
        return DemandPagingEngine(config)

    def test_resident_page_resolves(self) -> None:
        """Physical address is frame start plus offset."""
        engine = self._engine()
        engine.handle_access(0, 2)
        engine.handle_access(0, 1)
        assert resolve_physical(engine.page_table, engine.frames, 0, 1, 3) == 4 + 3

    def test_non_resident_page_fails(self) -> None:
        """A page that was never loaded cannot be translated."""
        engine = self._engine()
        with pytest.raises(PageNotResident):
            resolve_physical(engine.page_table, engine.frames, 0, 0, 0)

    def test_offset_outside_page_rejected(self) -> None:
        """Offsets must fall inside the page."""
        engine = self._engine()
        engine.handle_access(0, 0)
        with pytest.raises(InvalidConfig):
            resolve_physical(engine.page_table, engine.frames, 0, 0, 4)


class TestStaticPager:
    """Verify static paging loads every page up front."""

    def test_all_pages_loaded_with_spare_frame(self) -> None:
        """A 10-byte job with 4-byte pages uses 3 of 4 frames."""
        pager = StaticPager(Job(1, 10), 4, seed=7)
        assert len(pager.frames) == 4
        assert len(pager.frames.occupied_frames()) == 3
        assert pager.frames.find_free() == 3
        assert all(pte.valid for pte in pager.page_table.pages_of(1))

    def test_translation_uses_frame_start(self) -> None:
        """Every address maps into the frame holding its page."""
        pager = StaticPager(Job(1, 10), 4, seed=7)
        for address in range(10):
            t = pager.translate_address(address)
            assert (t.page_no, t.offset) == divmod(address, 4)
            assert t.physical == pager.frames.frame(t.frame_no).start + t.offset
            assert pager.frames.frame(t.frame_no).occupant == (1, t.page_no)

    def test_seeded_placement_is_reproducible(self) -> None:
        """The same seed places pages in the same frames."""
        first = StaticPager(Job(0, 40), 4, seed=3)
        second = StaticPager(Job(0, 40), 4, seed=3)
        assert first.frames.snapshot() == second.frames.snapshot()
        assert first.random_addresses(3) == second.random_addresses(3)

    def test_address_outside_job_rejected(self) -> None:
        """Addresses beyond the job size are invalid."""
        with pytest.raises(InvalidConfig):
            StaticPager(Job(0, 10), 4).translate_address(10)
