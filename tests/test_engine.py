"""Tests for the demand-paging engine and the run helpers."""

import pytest

from config import SimulationConfig, parse_sequence
from engine import FAULT, HIT, DemandPagingEngine, compare_policies, simulate
from errors import InternalInconsistency, InvalidConfig, KeyNotFound
from paging import Job
from replacement import ReplacementPolicy


def make_config(**overrides):
    settings = dict(page_size=4, jobs=[10, 12, 7], frame_count=3, access_count=200,
                    policy="FIFO", seed=1234, verify=True)
    settings.update(overrides)
    return SimulationConfig(**settings)


# -- Configuration ------------------------------------------------------------


class TestConfig:
    """Verify configuration is rejected before any state is built."""

    def test_zero_accesses_rejected(self) -> None:
        """accessCount=0 never reaches the engine."""
        with pytest.raises(InvalidConfig):
            make_config(access_count=0)

    @pytest.mark.parametrize("field,value", [
        ("page_size", 0), ("frame_count", 0), ("jobs", [10, 0]), ("jobs", []),
        ("policy", "OPT"), ("strategy", "zipf"),
    ])
    def test_invalid_values_rejected(self, field, value) -> None:
        """Non-positive sizes and unknown names are configuration errors."""
        with pytest.raises(InvalidConfig):
            make_config(**{field: value})

    def test_bare_sizes_become_jobs(self) -> None:
        """Plain sizes are numbered from zero."""
        config = make_config(jobs=[5, 9])
        assert config.jobs == [Job(0, 5), Job(1, 9)]

    def test_duplicate_job_ids_rejected(self) -> None:
        """Two jobs may not share an id."""
        with pytest.raises(InvalidConfig):
            make_config(jobs=[Job(1, 4), Job(1, 8)])

    def test_parse_sequence(self) -> None:
        """job:page pairs separated by commas or spaces."""
        assert parse_sequence("0:0, 0:1 1:2") == [(0, 0), (0, 1), (1, 2)]
        with pytest.raises(InvalidConfig):
            parse_sequence("0-1")


# -- Access handling ----------------------------------------------------------


class TestHandleAccess:
    """Verify hits, faults and table updates for single accesses."""

    def test_first_touch_is_fault_then_hit(self) -> None:
        """No page starts resident; the second touch hits the same frame."""
        engine = DemandPagingEngine(make_config())
        first = engine.handle_access(0, 1)
        second = engine.handle_access(0, 1)
        assert not first.hit and first.outcome == FAULT
        assert second.hit and second.outcome == HIT
        assert first.frame_no == second.frame_no == 0

    def test_free_frames_fill_lowest_first(self) -> None:
        """Faults take frames 0, 1, 2 in order."""
        engine = DemandPagingEngine(make_config())
        frames = [engine.handle_access(j, 0).frame_no for j in range(3)]
        assert frames == [0, 1, 2]

    def test_eviction_updates_both_tables(self) -> None:
        """The victim's entry is invalidated and the frame changes occupant."""
        engine = DemandPagingEngine(make_config(frame_count=1))
        engine.handle_access(0, 0)
        outcome = engine.handle_access(1, 2)
        assert outcome.evicted == (0, 0)
        assert not engine.page_table.lookup(0, 0).valid
        assert engine.page_table.lookup(0, 0).frame_no is None
        assert engine.frames.frame(0).occupant == (1, 2)

    def test_unknown_page_aborts(self) -> None:
        """A page outside the job is a KeyNotFound."""
        engine = DemandPagingEngine(make_config())
        with pytest.raises(KeyNotFound):
            engine.handle_access(0, 3)

    def test_trace_records_each_access(self) -> None:
        """Every access produces one trace event with its outcome."""
        engine = DemandPagingEngine(make_config(frame_count=1))
        engine.handle_access(0, 0)
        engine.handle_access(0, 0)
        engine.handle_access(0, 1)
        assert [(e.access_index, e.outcome, e.evicted) for e in engine.trace] == [
            (1, FAULT, None), (2, HIT, None), (3, FAULT, (0, 0)),
        ]

    def test_event_log_lines(self) -> None:
        """Faults log the fault and the load."""
        engine = DemandPagingEngine(make_config())
        engine.handle_access(2, 1)
        assert engine.event_log == ["Fault: J2 P1 not in memory", "Loaded: J2 P1 -> Frame 0"]

    def test_corrupted_tables_detected(self) -> None:
        """With verify on, a broken invariant aborts the access."""
        engine = DemandPagingEngine(make_config())
        engine.handle_access(0, 0)
        engine.page_table.lookup(0, 0).valid = False
        with pytest.raises(InternalInconsistency):
            engine.handle_access(1, 0)


# -- Runs ---------------------------------------------------------------------


class TestRun:
    """Verify whole simulation runs."""

    @pytest.mark.parametrize("policy", ReplacementPolicy.ALL)
    def test_conservation(self, policy) -> None:
        """hits + faults == accesses after any run."""
        result = simulate(make_config(policy=policy))
        stats = result.stats
        assert stats.accesses == 200
        assert stats.hits + stats.faults == stats.accesses
        assert stats.fault_rate == pytest.approx(stats.faults / 200)
        assert stats.hit_rate + stats.fault_rate == pytest.approx(1.0)

    @pytest.mark.parametrize("strategy", ["uniform", "job"])
    def test_determinism(self, strategy) -> None:
        """The same seed gives the same statistics and snapshots."""
        first = simulate(make_config(policy="LRU", strategy=strategy))
        second = simulate(make_config(policy="LRU", strategy=strategy))
        assert first.stats == second.stats
        assert first.frames == second.frames
        assert first.pages == second.pages
        assert first.trace == second.trace

    def test_fixed_sequence(self) -> None:
        """A fixed sequence runs to its end regardless of access_count."""
        result = simulate(make_config(frame_count=2), "FIFO", [(0, 0), (0, 1), (0, 2), (0, 0)])
        assert result.stats.accesses == 4
        assert result.stats.faults == 4
        assert [e.evicted for e in result.trace] == [None, None, (0, 0), (0, 1)]

    def test_empty_sequence_rejected(self) -> None:
        """No accesses means no rates."""
        with pytest.raises(InvalidConfig):
            simulate(make_config(), sequence=[])

    def test_stats_before_access_rejected(self) -> None:
        """Rates are never NaN."""
        with pytest.raises(InvalidConfig):
            DemandPagingEngine(make_config()).stats()

    def test_first_touches_always_fault(self) -> None:
        """The first access of each page in a trace is a fault."""
        result = simulate(make_config(policy="LRU"))
        seen = set()
        for event in result.trace:
            key = (event.job_id, event.page_no)
            if key not in seen:
                assert event.outcome == FAULT
                seen.add(key)

    def test_enough_frames_faults_once_per_page(self) -> None:
        """With a frame per page, only first touches fault."""
        result = simulate(make_config(frame_count=9))
        touched = {(e.job_id, e.page_no) for e in result.trace}
        assert result.stats.faults == len(touched)

    def test_fragmentation_reported(self) -> None:
        """Sizes 10, 12, 7 with page size 4 waste 2, 0 and 1."""
        result = simulate(make_config())
        assert result.fragmentation == {0: 2, 1: 0, 2: 1}

    def test_step_stops_when_sequence_exhausted(self) -> None:
        """A finite source runs dry and the run stops early."""
        engine = DemandPagingEngine(make_config(), accesses=[(0, 0)])
        result = engine.run(5)
        assert result.stats.accesses == 1
        assert engine.step() is None

    def test_compare_policies_share_sequence(self) -> None:
        """Every policy sees the same accesses."""
        results = compare_policies(make_config(), ReplacementPolicy.ALL)
        assert list(results) == ["FIFO", "LRU", "AGING"]
        sequences = [[(e.job_id, e.page_no) for e in r.trace] for r in results.values()]
        assert sequences[0] == sequences[1] == sequences[2]
        assert all(r.stats.accesses == 200 for r in results.values())
