def strict_not_none[T](not_none: T | None, /) -> T:
    if not_none is None:
        raise TypeError()
    return not_none
