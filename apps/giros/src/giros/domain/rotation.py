"""Round-robin cursor arithmetic."""


def next_rotation_index(last_assigned_index: int, pool_size: int) -> int:
    """Return the pool slot after last_assigned_index, wrapping around.

    A fresh cursor is -1, so the first pick is slot 0. A cursor left beyond
    a pool that has since shrunk still wraps into range.
    """

    if pool_size <= 0:
        raise ValueError("Pool size must be positive")
    return (last_assigned_index + 1) % pool_size
