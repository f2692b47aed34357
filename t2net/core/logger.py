import logging
import os


DEFAULT_LOG_FILENAME = 'train-log.txt'

LINE_FORMAT = ("[%(asctime)s] [%(name)s:%(lineno)d] "
               "%(levelname)-8s %(message)s")
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(filename=None, stdout=True, level=logging.DEBUG):
    """ Sets up logging formatting, etc

    Parameters
    ----------
    filename: str, default=None
        The log file, overwritten if it exists. The default (None) writes
        `train-log.txt` in the current directory.

    stdout: bool, default=True
        If True, log records are also written to the console.

    level: int, default=logging.DEBUG
        The root logger level.

    Returns
    -------
    handlers: list(logging.Handler)
        The handlers that were added to the root logger.
    """
    filename = filename or os.path.join(os.path.curdir, DEFAULT_LOG_FILENAME)

    formatter = logging.Formatter(fmt=LINE_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.FileHandler(filename, mode='w')]
    if stdout:
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    root.setLevel(level)

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    return handlers
