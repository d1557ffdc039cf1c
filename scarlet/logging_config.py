import logging
import sys

LOG_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(level='INFO'):
    """Attach a single stream handler to the scarlet logger; safe to call twice"""
    logger = logging.getLogger('scarlet')
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if not any(getattr(h, '_scarlet', False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handler._scarlet = True
        logger.addHandler(handler)
    return logger
