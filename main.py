"""
pmgraph Server Entry Point

Run with: python main.py
Or with uvicorn: uvicorn app:app --reload

PM_HOST / PM_PORT select the bind address; the remaining PM_* variables
are read by the app itself on startup.
"""

import os

import uvicorn

from pmgraph.config import Config

if __name__ == "__main__":
    config = Config.from_env()

    # Use reload only in development
    is_dev = os.getenv("ENVIRONMENT", "development") == "development"

    uvicorn.run(
        "app:app",
        host=os.getenv("PM_HOST", "127.0.0.1"),
        port=int(os.getenv("PM_PORT", "8000")),
        reload=is_dev,
        log_level=config.logging.level.lower(),
    )
