from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TextIO

from mcp_testserver.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


def serve(dispatcher: Dispatcher, instream: Iterable[str], outstream: TextIO) -> int:
    """Answer requests line by line until instream is exhausted.

    Each response is written and flushed before the next line is read.
    Returns the number of responses written.
    """
    written = 0
    for raw in instream:
        line = raw.strip()
        if not line:
            continue
        response = dispatcher.handle_line(line)
        if response is None:
            continue
        outstream.write(response + "\n")
        outstream.flush()
        written += 1
    logger.debug("End of input after %d responses", written)
    return written
