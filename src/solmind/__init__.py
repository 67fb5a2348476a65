"""SolMind - AI-driven Solana wallet auto-trader."""

import os

# Read by tensorflow's native runtime on first import.
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")

__version__ = "0.1.0"
