"""Entry point for running Elite XO via ``python -m elitexo``."""

from __future__ import annotations

import logging
import os

import uvicorn


def configure_logging(level: str) -> None:
    """Send package logs to stderr in a single pipe-separated format."""

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:
    """Start the FastAPI-powered Elite XO web server."""

    host = os.environ.get("ELITEXO_HOST", "0.0.0.0")
    port = int(os.environ.get("ELITEXO_PORT", "8000"))
    log_level = os.environ.get("ELITEXO_LOG_LEVEL", "INFO")
    configure_logging(log_level)
    uvicorn.run(
        "elitexo.ui:app",
        host=host,
        port=port,
        reload=False,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    main()
