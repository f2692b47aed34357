import logging

import numpy

from t2net.util.random_range import rand_num


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

LEARNING_RATE_TUNE_MIN = 0.0001
LEARNING_RATE_TUNE_MAX = 0.0009
LEARNING_RATE_TUNE_PRECISION = 4
ERROR_FLUCTUATION_LIMIT = 1


class StochasticLearningRateAdapter:
    """ Nudges the learning rate up or down by a small random amount when
    the output error keeps getting worse.

    Each time the error has increased `error_fluctuation_limit` times in a
    row, the learning rate is moved by a random jitter drawn from
    [tune_min, tune_max). The direction alternates: the first adjustment
    increases the rate, the next one decreases it, and so on.
    """

    def __init__(self, learning_rate=1.0,
                 error_fluctuation_limit=ERROR_FLUCTUATION_LIMIT,
                 tune_min=LEARNING_RATE_TUNE_MIN,
                 tune_max=LEARNING_RATE_TUNE_MAX,
                 tune_precision=LEARNING_RATE_TUNE_PRECISION,
                 random_state=None):
        """
        Parameters
        ----------
        learning_rate: float, default=1.0
            The initial learning rate.

        error_fluctuation_limit: int, default=1
            How many times the error can increase in a row before the
            learning rate is adjusted.

        tune_min, tune_max: float
            The range of the random jitter.

        tune_precision: int, default=4
            Number of decimal digits of the random jitter.

        random_state: numpy.random.RandomState, default=None
            Supply for reproducible results.
        """
        if error_fluctuation_limit < 1:
            msg = "`error_fluctuation_limit` ({}) must be at least 1"
            raise ValueError(msg.format(error_fluctuation_limit))

        self.learning_rate = learning_rate
        self.error_fluctuation_limit = error_fluctuation_limit
        self.tune_min = tune_min
        self.tune_max = tune_max
        self.tune_precision = tune_precision
        self.random_state = (numpy.random.RandomState()
                             if random_state is None else random_state)

        # Direction of the previous adjustment
        self.error_correction_increase = False

        # Consecutive worsening / non-worsening errors
        self.error_counter = 0
        self.non_error = 0

    def __repr__(self):
        return ("<StochasticLearningRateAdapter learning_rate={:.7f} "
                "increase={}>").format(self.learning_rate,
                                       self.error_correction_increase)

    def _jitter(self):
        return rand_num(self.tune_min, self.tune_max,
                        precision=self.tune_precision,
                        random_state=self.random_state)

    def adapt(self, old_error, new_error):
        """ Update the counters with the newest error and adjust the
        learning rate if the error has worsened too many times in a row.

        An `old_error` of None (no previous sample) counts as no increase.

        Returns
        -------
        learning_rate: float
            The (possibly adjusted) learning rate.
        """
        if old_error is not None and new_error > old_error:
            self.error_counter += 1
            self.non_error = 0

            if self.error_counter % self.error_fluctuation_limit == 0:
                previous = self.learning_rate
                if not self.error_correction_increase:
                    self.learning_rate += self._jitter()
                    self.error_correction_increase = True
                else:
                    self.learning_rate -= self._jitter()
                    self.error_correction_increase = False

                msg = ("Error increased {} time(s) in a row, learning rate "
                       "{:.7f} -> {:.7f}")
                logger.debug(msg.format(
                    self.error_counter, previous, self.learning_rate))
        else:
            self.error_counter = 0
            self.non_error += 1

        return self.learning_rate
