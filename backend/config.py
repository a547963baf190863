"""
Runtime configuration, read from the environment (optionally via a `.env`
file next to the project root).
"""
import os

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

# Upper bounds that keep a single request's runtime sane.
MAX_SIMULATIONS = int(os.getenv("MC_MAX_SIMULATIONS", "100000"))
MAX_DAYS = int(os.getenv("MC_MAX_DAYS", "365"))
MAX_TRADES_PER_DAY = int(os.getenv("MC_MAX_TRADES_PER_DAY", "100"))

# Simulations per chunk between cooperative yield points.
CHUNK_SIZE = int(os.getenv("MC_CHUNK_SIZE", "250"))

# 0 runs batches in-process; >0 fans out to a process pool.
MAX_WORKERS = int(os.getenv("MC_MAX_WORKERS", "0"))

ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
