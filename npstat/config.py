"""
Settings — all via environment variables with sensible defaults.
"""
import logging
import os
from typing import Optional


class Settings:
    # ── Logging ──
    LOG_LEVEL: str = os.getenv("NPSTAT_LOG_LEVEL", "INFO")

    # ── Exact Mann-Whitney limits (keeps the DP table tractable) ──
    EXACT_MAX_PRODUCT: int = int(os.getenv("NPSTAT_EXACT_MAX_PRODUCT", "400"))
    EXACT_MAX_SPAN: float = float(os.getenv("NPSTAT_EXACT_MAX_SPAN", "220"))

    # ── Sign test: exact binomial up to this many non-zero differences ──
    SIGN_EXACT_MAX_N: int = int(os.getenv("NPSTAT_SIGN_EXACT_MAX_N", "25"))


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a stream handler for the ``npstat`` logger hierarchy."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
