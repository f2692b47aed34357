import numpy


def rand_num(low, high, precision=None, random_state=None):
    """ Draw a uniform random number from [low, high)

    Parameters
    ----------
    low, high: float
        The range of the draw.

    precision: int, default=None
        If given, the result is rounded to this many decimal digits. A
        rounded value that lands on `high` is moved one unit of precision
        back inside the range.

    random_state: numpy.random.RandomState, default=None
        Supply for reproducible results.
    """
    if high <= low:
        msg = "`high` ({}) must be greater than `low` ({})"
        raise ValueError(msg.format(high, low))

    if random_state is None:
        random_state = numpy.random.RandomState()

    value = random_state.uniform(low=low, high=high)

    if precision is not None:
        value = round(value, precision)
        if value >= high:
            value = round(high - 10**-precision, precision)
        value = max(value, low)

    return float(value)
