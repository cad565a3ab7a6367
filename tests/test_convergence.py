#!/usr/bin/env python
"""
Unit tests for window convergence.
"""

import numpy as np
import pytest

from peak_consensus.convergence import (
    converge_window,
    find_raw_regions,
    points_in_window,
)
from peak_consensus.errors import ConvergenceError


class TestPointsInWindow:
    """Tests for selecting unconsumed points inside a window."""

    def test_bounds_are_inclusive(self):
        """Test points_in_window includes points on both window bounds."""
        positions = np.array([50, 100, 150, 151])
        consumed = np.zeros(4, dtype=bool)
        result = points_in_window(positions, consumed, 50, 150)
        np.testing.assert_array_equal(result, [0, 1, 2])

    def test_consumed_points_are_skipped(self):
        """Test points_in_window skips consumed points."""
        positions = np.array([10, 20, 30])
        consumed = np.array([False, True, False])
        result = points_in_window(positions, consumed, 0, 100)
        np.testing.assert_array_equal(result, [0, 2])


class TestConvergeWindow:
    """Tests for growing and re-centering a single window."""

    def test_window_recenters_on_median(self):
        """Test converge_window re-centers on the median with a doubled window."""
        positions = np.array([100, 140])
        consumed = np.zeros(2, dtype=bool)
        window = converge_window(positions, consumed, 0, 50)
        assert window.center == 120.0
        assert window.half_width == 100
        np.testing.assert_array_equal(window.included, [0, 1])

    def test_doubled_window_pulls_in_neighbors(self):
        """Test the doubled window picks up points outside the seed window."""
        # 160 is outside the seed window [50, 150] but inside [0, 200]
        positions = np.array([100, 160])
        consumed = np.zeros(2, dtype=bool)
        window = converge_window(positions, consumed, 0, 50)
        np.testing.assert_array_equal(window.included, [0, 1])
        assert window.center == 130.0

    def test_iteration_cap(self):
        """Test converge_window raises ConvergenceError past the iteration cap."""
        positions = np.array([100, 160])
        consumed = np.zeros(2, dtype=bool)
        with pytest.raises(ConvergenceError) as excinfo:
            converge_window(positions, consumed, 0, 50, max_iterations=1, chromosome="chr1")
        assert excinfo.value.chromosome == "chr1"
        assert excinfo.value.position == 100
        assert "did not converge" in str(excinfo.value)


class TestFindRawRegions:
    """Tests for scanning a whole chromosome."""

    def test_two_clusters(self):
        """Test find_raw_regions separates two clusters."""
        regions = find_raw_regions(np.array([100, 110, 500]), 50)
        assert [region.center for region in regions] == [105.0, 500.0]
        np.testing.assert_array_equal(regions[0].included, [0, 1])
        np.testing.assert_array_equal(regions[1].included, [2])

    def test_indices_refer_to_input_order(self):
        """Test included indices refer to the unsorted input."""
        regions = find_raw_regions(np.array([500, 110, 100]), 50)
        assert [region.center for region in regions] == [105.0, 500.0]
        np.testing.assert_array_equal(regions[0].included, [2, 1])
        np.testing.assert_array_equal(regions[1].included, [0])

    def test_identical_positions(self):
        """Test identical positions form a single region."""
        regions = find_raw_regions(np.array([10, 10, 10]), 5)
        assert len(regions) == 1
        assert regions[0].center == 10.0
        np.testing.assert_array_equal(regions[0].included, [0, 1, 2])

    def test_every_point_consumed_once(self):
        """Test every point ends up in exactly one raw region."""
        rng = np.random.default_rng(7)
        positions = rng.integers(0, 20000, size=300)
        regions = find_raw_regions(positions, 40)
        included = np.concatenate([region.included for region in regions])
        assert sorted(included.tolist()) == list(range(len(positions)))

    def test_empty_input(self):
        """Test find_raw_regions returns no regions for no points."""
        assert find_raw_regions(np.array([], dtype=int), 50) == []

    def test_larger_extending_size_merges(self):
        """Test a larger extending size merges nearby regions."""
        positions = np.array([100, 300])
        assert len(find_raw_regions(positions, 50)) == 2
        assert len(find_raw_regions(positions, 100)) == 1

    def test_larger_extending_size_can_regroup(self):
        """Test a larger extending size can move a point to another region."""
        positions = np.array([0, 120, 200])

        narrow = find_raw_regions(positions, 50)
        assert [region.center for region in narrow] == [0.0, 160.0]
        assert [region.included.tolist() for region in narrow] == [[0], [1, 2]]

        # the first seed window reaches 120 only at the larger size
        wide = find_raw_regions(positions, 60)
        assert [region.center for region in wide] == [60.0, 200.0]
        assert [region.included.tolist() for region in wide] == [[0, 1], [2]]


if __name__ == "__main__":
    pytest.main()
