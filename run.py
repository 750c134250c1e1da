#!/usr/bin/env python3
"""
Run the Property Search Aggregator web server.
"""

import logging

import uvicorn

from utils.config import Config


def main():
    """Start the web server."""
    config = Config.load()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"Starting Property Search Aggregator on http://{config.host}:{config.port}")
    if not config.intel_enabled:
        print("External search disabled (set INTEL_API_KEY to enable)")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "web.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
