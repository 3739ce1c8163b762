""" Runtime configuration for the parallel driver.

Callers tune the runtime by mutating the ``config`` dictionary directly::

    import ndsplit.config as nd_config
    nd_config.config["workers"] = 2

Values are read whenever a ``Driver`` is created, so changes take effect on
the next parallel call.

"""

import os

config = {
    # Number of pool workers. One worker runs everything on the calling thread.
    "workers": os.cpu_count() or 1,
    # Minimum number of items a split half may hold.
    "min_len": 1,
    # Initial split budget per worker; halved on every level of recursion.
    "splits_per_worker": 4,
    # "threads" or "processes".
    "mode": "threads",
}
