import math
import random

import pytest

from schemas.duel import Point
from utils.geometry import distance, is_point_in_bounds, is_point_in_circle, random_point


def test_distance_three_four_five():
    assert distance(Point(x=0, y=0), Point(x=3, y=4)) == 5


@pytest.mark.parametrize("x, y", [(0, 0), (100, 200), (800, 600), (0.1, 599.9)])
def test_distance_to_self_is_zero(x, y):
    point = Point(x=x, y=y)
    assert distance(point, point) == 0


def test_distance_is_symmetric_and_obeys_triangle_inequality():
    a, b, c = Point(x=10, y=20), Point(x=700, y=15), Point(x=300, y=590)

    assert distance(a, b) == distance(b, a)
    assert distance(a, c) <= distance(a, b) + distance(b, c)
    assert distance(b, c) <= distance(b, a) + distance(a, c)


def test_point_in_circle_includes_boundary():
    center = Point(x=100, y=100)

    assert is_point_in_circle(Point(x=100, y=100), center, 50)
    assert is_point_in_circle(Point(x=100, y=150), center, 50)
    assert not is_point_in_circle(Point(x=100, y=200), center, 50)


def test_bounds_have_no_tolerance():
    assert is_point_in_bounds(Point(x=800, y=600), 800, 600)
    assert is_point_in_bounds(Point(x=0, y=0), 800, 600)
    assert not is_point_in_bounds(Point(x=800 + 1e-10, y=0), 800, 600)
    assert not is_point_in_bounds(Point(x=-1e-10, y=0), 800, 600)
    assert not is_point_in_bounds(Point(x=math.nan, y=10), 800, 600)
    assert not is_point_in_bounds(Point(x=10, y=math.inf), 800, 600)


def test_random_point_stays_on_canvas():
    rng = random.Random(7)
    for _ in range(200):
        point = random_point(800, 600, rng)
        assert 0 <= point.x <= 800
        assert 0 <= point.y <= 600
