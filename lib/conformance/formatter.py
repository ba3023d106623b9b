"""
Log line format of the conformance listener.
"""

import logging

LINE_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogFormatter(logging.Formatter):
    """
    Formats records as ``yyyy-MM-dd HH:mm:ss.SSS [LEVEL] message``

    Exception info attached to a record is written after an
    ``Exception details:`` line.
    """

    def __init__(self):
        super().__init__(fmt=LINE_FORMAT, datefmt=DATE_FORMAT)

    def formatException(self, ei) -> str:
        return "Exception details: \n" + super().formatException(ei)
