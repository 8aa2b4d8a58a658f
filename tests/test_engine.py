"""Tests for the TraversalEngine state machine.

Uses the in-memory probe so listing lifetimes and injected failures can be
checked exactly.
"""

import sys
from pathlib import Path, PurePosixPath

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dazzlewalk import (
    DenylistEntryFilter,
    DirectoryCloseError,
    DirectoryIterationError,
    DirectoryOpenError,
    EngineState,
    EventKind,
    MetadataUnavailableError,
    PredicateEntryFilter,
    TraversalClosedError,
    TraversalConfig,
    TraversalEngine,
    TraversalStateError,
)
from dazzlewalk.testing import InMemoryProbe

ROOT = PurePosixPath("/root")
ENTER = EventKind.ENTER_DIRECTORY
EXIT = EventKind.EXIT_DIRECTORY
VISIT = EventKind.VISIT


def sample_probe(**kwargs) -> InMemoryProbe:
    """Create an in-memory tree.

    /root/
    ├── a/
    │   ├── one.txt
    │   └── two.txt
    ├── b/
    │   └── three.txt
    └── c.txt
    """
    probe = InMemoryProbe(**kwargs)
    probe.add_file("/root/a/one.txt")
    probe.add_file("/root/a/two.txt")
    probe.add_file("/root/b/three.txt")
    probe.add_file("/root/c.txt")
    return probe


def drain(engine, first):
    events = [first]
    while True:
        event = engine.advance()
        if event is None:
            return events
        events.append(event)


def summary(events):
    return [(e.kind, str(e.path)) for e in events]


def run(probe, **options):
    config = TraversalConfig(ROOT, **options)
    with TraversalEngine(config, probe) as engine:
        return drain(engine, engine.start(ROOT))


class TestEventSequence:

    def test_full_walk(self):
        probe = sample_probe()
        events = run(probe)

        assert summary(events) == [
            (ENTER, "/root"),
            (ENTER, "/root/a"),
            (VISIT, "/root/a/one.txt"),
            (VISIT, "/root/a/two.txt"),
            (EXIT, "/root/a"),
            (ENTER, "/root/b"),
            (VISIT, "/root/b/three.txt"),
            (EXIT, "/root/b"),
            (VISIT, "/root/c.txt"),
            (EXIT, "/root"),
        ]
        assert all(e.ok for e in events)
        assert probe.open_count == 3
        assert probe.balanced

    def test_enter_and_exit_are_balanced(self):
        events = run(sample_probe())

        open_dirs = []
        for event in events:
            if event.kind is ENTER:
                open_dirs.append(event.path)
            elif event.kind is EXIT:
                assert open_dirs.pop() == event.path
        assert open_dirs == []

    def test_max_depth_one(self):
        probe = sample_probe()
        events = run(probe, max_depth=1)

        assert summary(events) == [
            (ENTER, "/root"),
            (VISIT, "/root/a"),
            (VISIT, "/root/b"),
            (VISIT, "/root/c.txt"),
            (EXIT, "/root"),
        ]
        assert events[1].metadata.is_dir
        assert probe.open_count == 1

    def test_max_depth_zero_visits_only_the_start(self):
        probe = sample_probe()
        events = run(probe, max_depth=0)

        assert summary(events) == [(VISIT, "/root")]
        assert events[0].is_directory
        assert probe.open_count == 0

    def test_start_is_a_file(self):
        probe = sample_probe()
        config = TraversalConfig(ROOT / "c.txt")
        with TraversalEngine(config, probe) as engine:
            events = drain(engine, engine.start(config.start))

        assert summary(events) == [(VISIT, "/root/c.txt")]
        assert events[0].metadata.is_file

    def test_empty_directory(self):
        probe = InMemoryProbe()
        probe.add_dir("/root")
        assert summary(run(probe)) == [(ENTER, "/root"), (EXIT, "/root")]

    @pytest.mark.parametrize("entry_filter", [
        PredicateEntryFilter(lambda path, metadata: False),
        DenylistEntryFilter(["/root"]),
    ])
    def test_filter_rejecting_everything_still_enters_start(self, entry_filter):
        probe = sample_probe()
        config = TraversalConfig(ROOT, entry_filter=entry_filter)
        with TraversalEngine(config, probe) as engine:
            first = engine.start(ROOT)
            assert first is not None
            assert first.kind is ENTER
            events = drain(engine, first)

        assert summary(events) == [(ENTER, "/root"), (EXIT, "/root")]
        assert probe.open_count == 1
        assert probe.balanced

    def test_children_are_read_lazily(self):
        probe = sample_probe()
        config = TraversalConfig(ROOT)
        with TraversalEngine(config, probe) as engine:
            engine.start(ROOT)
            assert probe.children_read == 0

            engine.advance()  # enters /root/a
            assert probe.children_read == 1
            assert engine.depth == 2


class TestLifecycle:

    def test_states(self):
        engine = TraversalEngine(TraversalConfig(ROOT), sample_probe())
        assert engine.state is EngineState.IDLE

        engine.start(ROOT)
        assert engine.state is EngineState.OPEN
        assert engine.is_open()

        engine.close()
        assert engine.state is EngineState.CLOSED
        assert not engine.is_open()

    def test_start_twice(self):
        with TraversalEngine(TraversalConfig(ROOT), sample_probe()) as engine:
            engine.start(ROOT)
            with pytest.raises(TraversalStateError):
                engine.start(ROOT)

    def test_start_after_close(self):
        engine = TraversalEngine(TraversalConfig(ROOT), sample_probe())
        engine.close()
        with pytest.raises(TraversalClosedError):
            engine.start(ROOT)

    def test_close_mid_walk_releases_everything(self):
        probe = sample_probe()
        engine = TraversalEngine(TraversalConfig(ROOT), probe)
        engine.start(ROOT)
        engine.advance()
        assert len(probe.open_listings) == 2

        engine.close()
        engine.close()

        assert probe.balanced
        assert engine.depth == 0
        assert engine.advance() is None

    def test_advance_before_start(self):
        engine = TraversalEngine(TraversalConfig(ROOT), sample_probe())
        assert engine.advance() is None


class TestStackControl:

    def test_skip_remaining_siblings(self):
        probe = sample_probe()
        with TraversalEngine(TraversalConfig(ROOT), probe) as engine:
            engine.start(ROOT)
            assert engine.advance().path == ROOT / "a"

            engine.skip_remaining_siblings()
            rest = drain(engine, engine.advance())

        assert summary(rest) == [
            (EXIT, "/root/a"),
            (ENTER, "/root/b"),
            (VISIT, "/root/b/three.txt"),
            (EXIT, "/root/b"),
            (VISIT, "/root/c.txt"),
            (EXIT, "/root"),
        ]
        assert probe.balanced

    def test_pop_discards_without_exit(self):
        probe = sample_probe()
        with TraversalEngine(TraversalConfig(ROOT), probe) as engine:
            engine.start(ROOT)
            engine.advance()
            engine.pop()
            assert engine.depth == 1

            rest = drain(engine, engine.advance())

        assert (EXIT, "/root/a") not in summary(rest)
        assert summary(rest)[0] == (ENTER, "/root/b")
        assert probe.balanced

    def test_pop_ignores_close_failure(self):
        probe = sample_probe()
        probe.fail_close("/root/a")
        with TraversalEngine(TraversalConfig(ROOT), probe) as engine:
            engine.start(ROOT)
            engine.advance()
            engine.pop()
        assert probe.balanced

    def test_stack_operations_on_empty_stack(self):
        with TraversalEngine(TraversalConfig(ROOT), sample_probe()) as engine:
            engine.skip_remaining_siblings()
            engine.pop()
            assert engine.depth == 0


class TestFailures:

    def test_metadata_failure_is_a_failed_visit(self):
        probe = sample_probe()
        probe.fail_metadata("/root/a/two.txt")
        events = run(probe)

        failed = [e for e in events if not e.ok]
        assert len(failed) == 1
        assert failed[0].kind is VISIT
        assert str(failed[0].path) == "/root/a/two.txt"
        assert isinstance(failed[0].error, MetadataUnavailableError)
        assert isinstance(failed[0].error.__cause__, PermissionError)
        # The walk carries on
        assert (VISIT, "/root/c.txt") in summary(events)

    def test_open_failure_skips_the_subtree(self):
        probe = sample_probe()
        probe.fail_open("/root/b")
        events = run(probe)

        failed = [e for e in events if not e.ok]
        assert len(failed) == 1
        assert isinstance(failed[0].error, DirectoryOpenError)
        assert failed[0].metadata.is_dir
        assert "/root/b/three.txt" not in [p for _, p in summary(events)]
        assert probe.balanced

    def test_iteration_failure_exits_the_directory(self):
        probe = sample_probe()
        probe.fail_iteration("/root/a", after=1)
        events = run(probe)

        assert summary(events)[:4] == [
            (ENTER, "/root"),
            (ENTER, "/root/a"),
            (VISIT, "/root/a/one.txt"),
            (EXIT, "/root/a"),
        ]
        assert isinstance(events[3].error, DirectoryIterationError)
        assert (ENTER, "/root/b") in summary(events)
        assert probe.balanced

    def test_close_failure_is_carried_on_exit(self):
        probe = sample_probe()
        probe.fail_close("/root/b")
        events = run(probe)

        exit_b = [e for e in events if e.kind is EXIT and str(e.path) == "/root/b"][0]
        assert isinstance(exit_b.error, DirectoryCloseError)
        assert probe.balanced

    def test_close_failure_after_iteration_failure_is_suppressed(self):
        probe = sample_probe()
        probe.fail_iteration("/root/a", after=0)
        probe.fail_close("/root/a")
        events = run(probe)

        exit_a = [e for e in events if e.kind is EXIT and str(e.path) == "/root/a"][0]
        assert isinstance(exit_a.error, DirectoryIterationError)
        assert len(exit_a.error.suppressed) == 1
        assert isinstance(exit_a.error.suppressed[0], DirectoryCloseError)
        assert probe.balanced

    def test_start_metadata_failure(self):
        probe = sample_probe()
        probe.fail_metadata("/root")
        with TraversalEngine(TraversalConfig(ROOT), probe) as engine:
            first = engine.start(ROOT)
            assert engine.advance() is None

        assert first.kind is VISIT
        assert isinstance(first.error, MetadataUnavailableError)
        assert probe.open_count == 0
