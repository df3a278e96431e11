"""Геометрия поля дуэли."""
import math
import random

from schemas.duel import Point


def distance(a: Point, b: Point) -> float:
    """Евклидово расстояние между двумя точками."""
    return math.hypot(a.x - b.x, a.y - b.y)


def is_point_in_circle(point: Point, center: Point, radius: float) -> bool:
    # Граница круга считается попаданием
    return distance(point, center) <= radius


def is_point_in_bounds(point: Point, width: float, height: float) -> bool:
    """Точка конечна и лежит в [0, width] x [0, height], без допуска на границе."""
    if not (math.isfinite(point.x) and math.isfinite(point.y)):
        return False
    return 0 <= point.x <= width and 0 <= point.y <= height


def random_point(width: float, height: float, rng: random.Random | None = None) -> Point:
    """Равномерно случайная точка внутри поля."""
    rng = rng or random
    return Point(x=rng.uniform(0, width), y=rng.uniform(0, height))
