""" This module provides simple `on_sample` functions that can be supplied
to :meth:`t2net.core.distribution_unit.DistributionUnit.iterate`
"""
import logging


def collect_errors(error_list):
    """ Collects the per-sample output errors. Errors are appended to
    :code:`error_list` and so an empty list should be provided. Usage::

        errors = []
        unit.iterate(on_sample=[collect_errors(errors)])
    """

    def on_sample(i, error):
        error_list.append(error)

    return on_sample


def log_progress(n_samples, every=100, logger=None):
    """ Log a progress line every `every` samples
    """
    logger = logger or logging.getLogger('progress')
    width = len(str(n_samples))

    def on_sample(i, error):
        if (i + 1) % every == 0 or i + 1 == n_samples:
            msg = "({:0{w}d} / {:d}) error = {:.7f}"
            logger.info(msg.format(i + 1, n_samples, error, w=width))

    return on_sample
