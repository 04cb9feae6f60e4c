"""
Logging Configuration for the Line-of-Position Globe.

Every module obtains its logger through `get_logger` so output shares one
format. Per-point code (geometry, scoring) logs only at DEBUG level and only
on degenerate configurations; frame- and input-level events log at INFO.
"""

import logging
import sys


# Configure root logger for the package
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the LOP globe.
    
    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.
        
    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    
    logger.setLevel(level)
    return logger
