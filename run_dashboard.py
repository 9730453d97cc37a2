#!/usr/bin/env python
"""
Long/Short Ratio API Server Runner.

Binds to DASHBOARD_HOST / DASHBOARD_PORT (see LongShortConfig) and checks
the whole configuration before uvicorn starts, so a bad roster or timeout
fails here rather than on the first request.

Usage:
    python run_dashboard.py

Or with PM2:
    pm2 start run_dashboard.py --interpreter python
"""

import logging
import os
import sys
from typing import Optional

import uvicorn
from dotenv import load_dotenv

from long_short_ratio.config import LongShortConfig, set_config
from long_short_ratio.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


def main(environ: Optional[dict[str, str]] = None) -> int:
    """Validate configuration, then serve long_short_ratio.api:app."""
    try:
        config = LongShortConfig.from_env(environ)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    set_config(config)

    env = os.environ if environ is None else environ
    reload = env.get("ENVIRONMENT", "production") == "development"

    logger.info(
        f"Starting Long/Short Ratio API on {config.dashboard_host}:{config.dashboard_port} "
        f"(exchanges: {', '.join(config.exchanges)})"
    )

    try:
        uvicorn.run(
            "long_short_ratio.api:app",
            host=config.dashboard_host,
            port=config.dashboard_port,
            reload=reload,
            log_level="info",
            access_log=True,
        )
    except Exception as e:
        logger.error(f"Failed to start API server: {e}")
        return 1
    return 0


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    sys.exit(main())
