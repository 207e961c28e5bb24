import pytest

from schedsim.algorithms import (
    ALGORITHMS,
    run_algorithm,
    run_all,
    schedule_fcfs,
    schedule_rr,
    schedule_sjf,
    schedule_sjf_priority,
)
from schedsim.models import InvalidWorkloadError, Process


def _procs():
    return [
        Process(1, arrival_time=0, burst_time=5),
        Process(2, arrival_time=1, burst_time=3),
        Process(3, arrival_time=2, burst_time=1),
    ]


def _mixed():
    return [
        Process(1, arrival_time=0, burst_time=8, priority=2),
        Process(2, arrival_time=1, burst_time=4, priority=1),
        Process(3, arrival_time=2, burst_time=9, priority=3),
        Process(4, arrival_time=3, burst_time=5, priority=0),
    ]


def _gapped():
    return [
        Process(1, arrival_time=0, burst_time=2),
        Process(2, arrival_time=5, burst_time=3),
        Process(3, arrival_time=6, burst_time=1),
    ]


def _slices(result):
    return [(s.pid, s.start, s.stop) for s in result.timeline]


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert _slices(res) == [(1, 0, 5), (2, 5, 8), (3, 8, 9)]
    assert [r.waiting for r in res.rows] == [0, 4, 6]
    assert [r.turnaround for r in res.rows] == [5, 7, 7]
    assert [r.exit for r in res.rows] == [5, 8, 9]
    assert res.stats.avg_wait == pytest.approx(10 / 3)
    assert res.stats.throughput == pytest.approx(3 / 9)


def test_fcfs_keeps_input_order():
    procs = [Process(1, 4, 2), Process(2, 0, 3)]
    res = schedule_fcfs(procs)
    assert [s.pid for s in res.timeline] == [1, 2]


def test_fcfs_zero_arrival_carries_previous_wait():
    procs = [Process(1, 0, 3), Process(2, 1, 2), Process(3, 0, 4)]
    res = schedule_fcfs(procs)
    assert [r.waiting for r in res.rows] == [0, 2, 2]
    assert res.rows[2].exit == 6
    assert res.stats.throughput == pytest.approx(3 / 6)


def test_sjf_preempts_for_shorter_remaining():
    res = schedule_sjf(_procs())
    assert _slices(res) == [(1, 0, 1), (2, 1, 2), (3, 2, 3), (2, 3, 5), (1, 5, 9)]
    assert [r.waiting for r in res.rows] == [4, 1, 0]
    assert [r.exit for r in res.rows] == [9, 5, 3]
    assert res.stats.throughput == pytest.approx(3 / 9)


def test_sjf_idles_until_next_arrival():
    res = schedule_sjf(_gapped())
    assert _slices(res) == [(1, 0, 2), (2, 5, 6), (3, 6, 7), (2, 7, 9)]
    assert [r.waiting for r in res.rows] == [0, 1, 0]
    assert res.stats.throughput == pytest.approx(3 / 9)


def test_sjf_tie_keeps_running_process():
    procs = [Process(1, 0, 4, priority=0), Process(2, 1, 3, priority=9)]
    res = schedule_sjf(procs)
    assert _slices(res) == [(1, 0, 4), (2, 4, 7)]
    assert [r.waiting for r in res.rows] == [0, 3]


def test_sjf_priority_breaks_tie_in_favor_of_larger_priority():
    procs = [Process(1, 0, 4, priority=0), Process(2, 1, 3, priority=9)]
    res = schedule_sjf_priority(procs)
    assert _slices(res) == [(1, 0, 1), (2, 1, 4), (1, 4, 7)]
    assert [r.waiting for r in res.rows] == [3, 0]
    assert res.algorithm == "Priority"


def test_sjf_priority_initial_pick_on_equal_bursts():
    procs = [Process(1, 0, 3, priority=1), Process(2, 0, 3, priority=5)]
    assert [s.pid for s in schedule_sjf(procs).timeline] == [1, 2]
    assert [s.pid for s in schedule_sjf_priority(procs).timeline] == [2, 1]


@pytest.mark.parametrize("workload", [_procs, _mixed, _gapped])
def test_sjf_priority_matches_sjf_without_ties(workload):
    plain = schedule_sjf(workload())
    prio = schedule_sjf_priority(workload())
    assert plain.timeline == prio.timeline
    assert plain.rows == prio.rows


def test_rr_quantum_2():
    procs = [Process(1, 0, 4), Process(2, 0, 2)]
    res = schedule_rr(procs)
    assert _slices(res) == [(1, 0, 2), (2, 2, 4), (1, 4, 6)]
    assert [r.turnaround for r in res.rows] == [6, 4]
    assert [r.waiting for r in res.rows] == [2, 2]
    assert res.quantum == 2
    assert res.stats.throughput == pytest.approx(2 / 6)


def test_rr_sweeps_in_arrival_order():
    res = schedule_rr(_mixed())
    assert [r.waiting for r in res.rows] == [15, 7, 15, 13]
    assert [r.exit for r in res.rows] == [23, 12, 26, 21]
    assert res.stats.throughput == pytest.approx(4 / 26)


def test_rr_sorts_private_copy():
    procs = [Process(2, 3, 1), Process(1, 0, 2)]
    res = schedule_rr(procs)
    assert [r.pid for r in res.rows] == [1, 2]
    assert [p.pid for p in procs] == [2, 1]
    assert _slices(res) == [(1, 0, 2), (2, 3, 4)]


def test_rr_without_arrival_gating_runs_early():
    procs = [Process(1, 0, 2), Process(2, 3, 1)]
    res = schedule_rr(procs, idle_until_arrival=False)
    assert _slices(res) == [(1, 0, 2), (2, 2, 3)]
    assert res.rows[1].turnaround == 0
    assert res.rows[1].waiting == -1


def test_rr_rejects_bad_quantum():
    with pytest.raises(ValueError):
        schedule_rr(_procs(), quantum=0)


@pytest.mark.parametrize("name", list(ALGORITHMS))
def test_single_process(name):
    res = run_algorithm(name, [Process(7, arrival_time=3, burst_time=2)])
    assert _slices(res) == [(7, 3, 5)]
    assert res.rows[0].waiting == 0
    assert res.rows[0].exit == 5


@pytest.mark.parametrize("name", ["fcfs", "sjf", "priority"])
def test_single_long_process_is_one_slice(name):
    res = run_algorithm(name, [Process(1, arrival_time=0, burst_time=5)])
    assert _slices(res) == [(1, 0, 5)]


@pytest.mark.parametrize("name", list(ALGORITHMS))
@pytest.mark.parametrize("workload", [_procs, _mixed])
def test_timing_invariants(name, workload):
    procs = workload()
    res = run_algorithm(name, procs)
    for row in res.rows:
        assert row.waiting >= 0
        assert row.turnaround == row.waiting + row.burst
    assert sum(s.duration for s in res.timeline) == sum(p.burst_time for p in procs)


@pytest.mark.parametrize("name", list(ALGORITHMS))
@pytest.mark.parametrize("workload", [_procs, _mixed, _gapped])
def test_slices_are_ordered_and_disjoint(name, workload):
    if name == "fcfs" and workload is _gapped:
        pytest.skip("FCFS waiting ignores idle gaps")
    res = run_algorithm(name, workload())
    for s in res.timeline:
        assert s.start < s.stop
    for a, b in zip(res.timeline, res.timeline[1:]):
        assert a.stop <= b.start


@pytest.mark.parametrize("name", ["sjf", "priority", "rr"])
def test_exit_is_stop_of_last_slice(name):
    res = run_algorithm(name, _mixed())
    for row in res.rows:
        last = [s for s in res.timeline if s.pid == row.pid][-1]
        assert row.exit == last.stop


@pytest.mark.parametrize("func", [schedule_fcfs, schedule_sjf, schedule_sjf_priority, schedule_rr])
def test_rejects_degenerate_input(func):
    with pytest.raises(InvalidWorkloadError):
        func([])
    with pytest.raises(InvalidWorkloadError):
        func([Process(1, 0, 0)])
    with pytest.raises(InvalidWorkloadError):
        func([Process(1, -1, 3)])


def test_run_algorithm_unknown():
    with pytest.raises(ValueError):
        run_algorithm("lottery", _procs())


def test_run_all_canonical_order():
    results = run_all(_procs())
    assert [r.algorithm for r in results] == [
        "First-come, first-serve",
        "Shortest-job-first",
        "Priority",
        "Round-robin",
    ]


def test_run_all_parallel_matches_sequential():
    assert run_all(_mixed(), parallel=True) == run_all(_mixed())
