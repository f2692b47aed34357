def mean_squared_error(target, output):
    """ Squared error of a single sample, i.e., the mean over one term
    """
    diff = target - output
    return diff * diff


COSTS = {
    'meanSquaredError': mean_squared_error,
}
