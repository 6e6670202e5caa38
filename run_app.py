#!/usr/bin/env python3
"""
Simple runner script for the tracker demo application.
This script ensures the correct Python path is set and runs the app.
"""

import sys
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from surfside_tracker.logging_config import setup_logging, stop_logging


def main() -> None:
    from config_manager import get_app_config, get_tracker_config
    app_config = get_app_config()
    tracker_config = get_tracker_config()

    setup_logging(debug=app_config.debug)

    # Import after logging is configured so module loggers inherit it
    from app.main import app

    print("🚀 Starting tracker demo application...")
    print(f"📁 Working directory: {current_dir}")
    print(f"📡 Collector: {tracker_config.collector_endpoint} (namespace: {tracker_config.namespace})")

    try:
        app.run(
            host=app_config.host,
            port=app_config.port,
            debug=app_config.debug
        )
    finally:
        app.extensions["demo_executor"].session.shutdown(wait=False)
        stop_logging()


if __name__ == "__main__":
    main()
