import logging

import pytest


@pytest.fixture(autouse=True)
def _fresh_csvbind_logger():
    # BindConfig attaches a stream handler bound to the stderr of the moment
    yield
    log = logging.getLogger("csvbind")
    for h in list(log.handlers):
        log.removeHandler(h)
