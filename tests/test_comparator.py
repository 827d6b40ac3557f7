"""Tests for key mapping comparison."""

import random

from s3content.sync.comparator import DiffResult, diff_mappings


class TestDiffMappings:
    """Tests for diff_mappings."""

    def test_added_and_removed(self):
        """prev {a.html, b.css} vs curr {a.html, c.js}."""
        previous = {"/r/a.html": "a.html", "/r/b.css": "b.css"}
        current = {"/r/a.html": "a.html", "/r/c.js": "c.js"}

        diff = diff_mappings(previous, current)

        assert diff.added == {"/r/c.js": "c.js"}
        assert diff.removed == {"/r/b.css": "b.css"}
        assert diff.unchanged == {"/r/a.html": "a.html"}

    def test_identical_mappings_are_empty(self):
        mapping = {"/r/a.html": "a.html", "/r/img/b.png": "img/b.png"}

        diff = diff_mappings(mapping, dict(mapping))

        assert diff.is_empty
        assert diff.added == {}
        assert diff.removed == {}
        assert diff.unchanged == mapping

    def test_empty_previous_adds_everything(self):
        current = {"/r/a.html": "a.html"}

        diff = diff_mappings({}, current)

        assert diff.added == current
        assert diff.removed == {}

    def test_empty_current_removes_everything(self):
        previous = {"/r/a.html": "a.html"}

        diff = diff_mappings(previous, {})

        assert diff.removed == previous
        assert diff.added == {}

    def test_changed_key_is_removed_and_added(self):
        diff = diff_mappings({"/r/a.html": "old/a.html"}, {"/r/a.html": "a.html"})

        assert diff.removed == {"/r/a.html": "old/a.html"}
        assert diff.added == {"/r/a.html": "a.html"}
        assert diff.unchanged == {}

    def test_partition_properties(self):
        """Added, removed and unchanged partition previous and current."""
        rng = random.Random(1234)
        universe = [f"/r/f{i}.txt" for i in range(40)]
        for _ in range(25):
            previous = {p: p[3:] for p in rng.sample(universe, rng.randint(0, 40))}
            current = {p: p[3:] for p in rng.sample(universe, rng.randint(0, 40))}

            diff = diff_mappings(previous, current)

            assert not set(diff.added) & set(diff.removed)
            assert not set(diff.added) & set(diff.unchanged)
            assert not set(diff.removed) & set(diff.unchanged)
            assert set(diff.added) | set(diff.removed) | set(diff.unchanged) == (
                set(previous) | set(current)
            )
            for identifier in previous:
                assert (identifier in diff.removed) == (identifier not in current)


class TestDiffResult:
    """Tests for DiffResult helpers."""

    def test_to_dict(self):
        diff = DiffResult(
            added={"/r/c.js": "c.js", "/r/a.js": "a.js"},
            removed={"/r/b.css": "b.css"},
            unchanged={"/r/a.html": "a.html"},
        )

        assert diff.to_dict() == {
            "added": ["a.js", "c.js"],
            "removed": ["b.css"],
            "unchanged": 1,
        }

    def test_empty_by_default(self):
        assert DiffResult().is_empty
