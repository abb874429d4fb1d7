import pytest

from branchsource.scm import (
    BranchHead,
    BranchRevision,
    CollectorState,
    CollectorStateError,
    FirstMatchCollector,
    HeadCollector,
    LimitCollector,
)


def _rev(name, n):
    return BranchRevision(BranchHead(name), f"{n:040x}")


def test_collects_in_insertion_order():
    collector = HeadCollector()
    for i, name in enumerate(["b", "a", "c"]):
        collector.observe(BranchHead(name), _rev(name, i))
        assert collector.should_continue()
    collector.complete()

    assert collector.state == CollectorState.COMPLETE
    assert [h.name for h in collector.result()] == ["b", "a", "c"]


def test_last_write_wins():
    collector = HeadCollector()
    collector.observe(BranchHead("a"), _rev("a", 1))
    collector.observe(BranchHead("b"), _rev("b", 2))
    collector.observe(BranchHead("a"), _rev("a", 3))
    collector.complete()

    result = collector.result()
    assert len(result) == 2
    assert list(result) == [BranchHead("a"), BranchHead("b")]
    assert result[BranchHead("a")] == _rev("a", 3)


def test_result_requires_finished_collection():
    collector = HeadCollector()
    collector.observe(BranchHead("a"), _rev("a", 1))
    with pytest.raises(CollectorStateError):
        collector.result()


def test_result_is_a_copy():
    collector = HeadCollector()
    collector.observe(BranchHead("a"), _rev("a", 1))
    collector.complete()
    collector.result().clear()
    assert len(collector.result()) == 1


def test_cancel():
    collector = HeadCollector()
    collector.observe(BranchHead("a"), _rev("a", 1))
    collector.cancel()
    assert not collector.should_continue()
    assert collector.state == CollectorState.CANCELLED
    # completion after cancellation keeps the cancelled state
    collector.complete()
    assert collector.state == CollectorState.CANCELLED
    assert len(collector.result()) == 1

    with pytest.raises(CollectorStateError):
        collector.observe(BranchHead("b"), _rev("b", 2))


def test_first_match():
    collector = FirstMatchCollector()
    assert collector.should_continue()
    collector.observe(BranchHead("a"), _rev("a", 1))
    assert not collector.should_continue()
    assert list(collector.result()) == [BranchHead("a")]


def test_limit():
    with pytest.raises(ValueError):
        LimitCollector(0)

    collector = LimitCollector(2)
    collector.observe(BranchHead("a"), _rev("a", 1))
    # replacing an existing head does not count twice
    collector.observe(BranchHead("a"), _rev("a", 2))
    assert collector.should_continue()
    collector.observe(BranchHead("b"), _rev("b", 3))
    assert not collector.should_continue()
