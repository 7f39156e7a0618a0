# config.py
import os

# ======= Default board =======
GRID_WIDTH       = int(os.getenv("NC_GRID_WIDTH", "7"))
GRID_HEIGHT      = int(os.getenv("NC_GRID_HEIGHT", "7"))
GRID_HAS_OOB     = int(os.getenv("NC_GRID_HAS_OOB", "1")) != 0
COMMAND_LINE_ROW = int(os.getenv("NC_COMMAND_LINE_ROW", "3"))

# ======= Search knobs =======
# Memoising on the part layout of the board collapses requirement orderings
# that produce the same physical arrangement.
MEMOIZE = int(os.getenv("NC_MEMOIZE", "1")) != 0

# Upper bound on the number of parts chosen by the attribute search.  A
# non-positive value falls back to the number of placeable cells.
PART_LIMIT = int(os.getenv("NC_PART_LIMIT", "0"))

# ======= CP-SAT feasibility probe =======
CP_SAT_PROBE   = int(os.getenv("NC_CP_SAT_PROBE", "0")) != 0
CP_SAT_SECONDS = float(os.getenv("NC_CP_SAT_SECONDS", "2"))
WORKERS        = int(os.getenv("NC_WORKERS", "1"))
MAX_MEMORY_MB  = int(os.getenv("NC_MAX_MEMORY_MB", "2048"))
RANDOM_SEED    = int(os.getenv("NC_RANDOM_SEED", "0"))

# ======= Logging =======
# Path of the search event log; empty disables the file handler.
SEARCH_LOG = os.getenv("NC_SEARCH_LOG", "")

class CFG:
    GRID_WIDTH       = GRID_WIDTH
    GRID_HEIGHT      = GRID_HEIGHT
    GRID_HAS_OOB     = GRID_HAS_OOB
    COMMAND_LINE_ROW = COMMAND_LINE_ROW

    MEMOIZE    = MEMOIZE
    PART_LIMIT = PART_LIMIT

    CP_SAT_PROBE   = CP_SAT_PROBE
    CP_SAT_SECONDS = CP_SAT_SECONDS
    WORKERS        = WORKERS
    MAX_MEMORY_MB  = MAX_MEMORY_MB
    RANDOM_SEED    = RANDOM_SEED

    SEARCH_LOG = SEARCH_LOG

__all__ = ["CFG"]
