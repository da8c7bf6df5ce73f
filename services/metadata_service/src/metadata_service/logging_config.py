from __future__ import annotations

import logging

FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    """Configure the root logger to write to stderr at ``level``."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=FORMAT,
        handlers=[logging.StreamHandler()],
        force=True,
    )
