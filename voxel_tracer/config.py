"""Runtime settings read from ``VOXEL_TRACER_*`` environment variables."""

import os
from pathlib import Path

# Logging
LOG_LEVEL = os.getenv("VOXEL_TRACER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Output
OUTPUT_DIR = Path(os.getenv("VOXEL_TRACER_OUTPUT_DIR", "images"))

# Acceleration and sampling
GRID_DENSITY = float(os.getenv("VOXEL_TRACER_GRID_DENSITY", "4.0"))
BEAM_SIZE = int(os.getenv("VOXEL_TRACER_BEAM_SIZE", "9"))

# Rendering: 0 renders serially, -1 picks a thread count from the CPU count
THREADS = int(os.getenv("VOXEL_TRACER_THREADS", "0"))
