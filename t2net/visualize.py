import matplotlib.pyplot as plt


def plot_error_history(errors, ax=None, **line_kwargs):
    """ Plot the per-sample output errors of a training run

    Parameters
    ----------
    errors: list(float)
        The errors, e.g., :code:`unit.errors` after :code:`unit.iterate()`.

    ax: matplotlib.axes.Axes, default=None
        The axis to draw on. A new figure is created when None.

    line_kwargs: args
        Any keyword arguments that can be passed to
        `matplotlib.pyplot.plot`.

    Returns
    -------
    ax: matplotlib.axes.Axes
    """
    if len(errors) == 0:
        raise ValueError("`errors` is empty.")

    if ax is None:
        _, ax = plt.subplots(figsize=(6, 4))

    kwargs = dict(c='b', ls='-', lw=1)
    kwargs.update(line_kwargs)

    ax.plot(range(len(errors)), errors, **kwargs)
    ax.set_xlabel('Sample')
    ax.set_ylabel('Error')

    return ax
