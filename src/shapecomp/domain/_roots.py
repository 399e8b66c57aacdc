"""Internal closed-form polynomial root solvers.

This is an internal module used by the segment kernel.
Not intended for public use.
"""

import math

_EPSILON = 1e-12


def _is_negligible(value: float, *others: float) -> bool:
    scale = max([abs(o) for o in others] + [1.0])
    return abs(value) <= _EPSILON * scale


def solve_linear(a: float, b: float) -> list[float]:
    """Real roots of a*t + b = 0."""
    if _is_negligible(a, b):
        return []
    return [-b / a]


def solve_quadratic(a: float, b: float, c: float) -> list[float]:
    """Real roots of a*t^2 + b*t + c = 0, sorted ascending.

    Falls back to the linear solver when a vanishes.
    """
    if _is_negligible(a, b, c):
        return solve_linear(b, c)

    discriminant = b * b - 4.0 * a * c
    if discriminant < 0.0:
        if discriminant > -_EPSILON * max(b * b, 1.0):
            return [-b / (2.0 * a)]
        return []
    if discriminant == 0.0:
        return [-b / (2.0 * a)]

    # Numerically stable form avoids cancellation for small roots
    sqrt_d = math.sqrt(discriminant)
    q = -0.5 * (b + math.copysign(sqrt_d, b))
    roots = [q / a]
    if q != 0.0:
        roots.append(c / q)
    else:
        roots.append(-b / a - roots[0])
    return sorted(roots)


def _cbrt(value: float) -> float:
    return math.copysign(abs(value) ** (1.0 / 3.0), value)


def solve_cubic(a: float, b: float, c: float, d: float) -> list[float]:
    """Real roots of a*t^3 + b*t^2 + c*t + d = 0, sorted ascending.

    Uses the trigonometric form for three real roots and Cardano's formula
    otherwise. Each root gets one Newton polish step, kept only when it
    lowers the residual.
    """
    if _is_negligible(a, b, c, d):
        return solve_quadratic(b, c, d)

    # Normalize to t^3 + A t^2 + B t + C
    A = b / a
    B = c / a
    C = d / a

    q = (3.0 * B - A * A) / 9.0
    r = (9.0 * A * B - 27.0 * C - 2.0 * A * A * A) / 54.0
    discriminant = q * q * q + r * r
    offset = A / 3.0

    if discriminant > _EPSILON:
        sqrt_d = math.sqrt(discriminant)
        roots = [_cbrt(r + sqrt_d) + _cbrt(r - sqrt_d) - offset]
    elif discriminant >= -_EPSILON:
        u = _cbrt(r)
        roots = [2.0 * u - offset, -u - offset]
    else:
        theta = math.acos(max(-1.0, min(1.0, r / math.sqrt(-q * q * q))))
        m = 2.0 * math.sqrt(-q)
        roots = [
            m * math.cos((theta + 2.0 * math.pi * k) / 3.0) - offset
            for k in range(3)
        ]

    polished = []
    for t in roots:
        f = ((a * t + b) * t + c) * t + d
        df = (3.0 * a * t + 2.0 * b) * t + c
        if df != 0.0:
            # Near a double root f and df both vanish and the step overshoots
            candidate = t - f / df
            if abs(((a * candidate + b) * candidate + c) * candidate + d) < abs(f):
                t = candidate
        polished.append(t)
    return sorted(polished)
