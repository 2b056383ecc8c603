import math


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min_val and max_val."""
    return max(min_val, min(max_val, value))


def smooth_damp(current: float, target: float, rate: float, dt: float) -> float:
    """Exponential approach: closes (1 - e^(-rate*dt)) of the gap each call."""
    if dt <= 0.0:
        return current
    return current + (target - current) * (1.0 - math.exp(-rate * dt))


def approach(current: float, target: float, speed: float, dt: float) -> float:
    """Move toward target by at most speed*dt, landing exactly on it."""
    delta = speed * max(0.0, dt)
    diff = target - current
    if abs(diff) <= delta:
        return target
    return current + (delta if diff > 0 else -delta)
