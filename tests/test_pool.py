"""Tests for the weight-class pool."""

import pytest

from mail_sim.errors import OverweightError
from mail_sim.models import carry_class_for
from mail_sim.pool import WeightClassPool


class TestCarryClass:
    """Weight to carry-class boundaries."""

    @pytest.mark.parametrize(
        "weight,expected",
        [(1, 1), (2000, 1), (2001, 2), (2600, 2), (2601, 3), (3000, 3), (3001, None)],
    )
    def test_boundaries(self, weight, expected):
        assert carry_class_for(weight) == expected


class TestWeightClassPool:
    """Tests for insertion, ordering and removal."""

    def test_insert_partitions_by_weight(self, make_item):
        pool = WeightClassPool()
        light = make_item(weight=1500)
        pair = make_item(weight=2500)
        triple = make_item(weight=2800)

        assert pool.insert(light) == 1
        assert pool.insert(pair) == 2
        assert pool.insert(triple) == 3

        assert pool.items(1) == (light,)
        assert pool.items(2) == (pair,)
        assert pool.items(3) == (triple,)
        assert len(pool) == 3

    def test_overweight_rejected_and_pool_unchanged(self, make_item):
        pool = WeightClassPool()
        pool.insert(make_item(weight=1000))
        heavy = make_item(weight=3500)

        with pytest.raises(OverweightError) as exc:
            pool.insert(heavy)

        assert exc.value.item is heavy
        assert len(pool) == 1
        assert heavy not in pool

    def test_higher_priority_first(self, make_item):
        pool = WeightClassPool()
        low = make_item(priority=1, dest=1)
        high = make_item(priority=10, dest=9)
        pool.insert(low)
        pool.insert(high)
        assert pool.items(1) == (high, low)

    def test_lower_floor_first_on_equal_priority(self, make_item):
        pool = WeightClassPool()
        far = make_item(dest=8)
        near = make_item(dest=2)
        pool.insert(far)
        pool.insert(near)
        assert pool.items(1) == (near, far)

    def test_arrival_order_kept_on_full_tie(self, make_item):
        pool = WeightClassPool()
        first = make_item(dest=4)
        second = make_item(dest=4)
        third = make_item(dest=4)
        for item in (first, second, third):
            pool.insert(item)
        pool.insert(make_item(dest=4, priority=5))
        assert pool.items(1)[1:] == (first, second, third)

    def test_peek_best_per_class(self, make_item):
        pool = WeightClassPool()
        assert pool.peek_best_per_class() == []

        a = make_item(weight=100, dest=5)
        b = make_item(weight=100, dest=2)
        c = make_item(weight=2900, dest=7)
        for item in (a, b, c):
            pool.insert(item)

        assert pool.peek_best_per_class() == [(1, b), (3, c)]

    def test_pop_front_and_remove_at(self, make_item):
        pool = WeightClassPool()
        items = [make_item(dest=d) for d in (1, 2, 3)]
        for item in items:
            pool.insert(item)

        assert pool.remove_at(1, 1) is items[1]
        assert pool.pop_front(1) is items[0]
        assert pool.items(1) == (items[2],)

    def test_removal_errors(self):
        pool = WeightClassPool()
        with pytest.raises(IndexError):
            pool.pop_front(2)
        with pytest.raises(IndexError):
            pool.remove_at(1, 0)
        with pytest.raises(KeyError):
            pool.queue_len(4)
