import os

USE_NUMBA_CACHING = os.environ.get("USE_NUMBA_CACHING", "0") == "1"
