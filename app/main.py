"""
Demo web application.

Serves the tracker demo as JSON endpoints; each endpoint triggers one tracker
operation and appends to the in-memory log list.
"""

import sys
from pathlib import Path
from typing import Callable, Optional

# Import configuration management
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import ConfigManager

from flask import Flask, jsonify
import requests

from app.demo.factory import create_demo_module


def create_app(config_manager: Optional[ConfigManager] = None,
               http_session_factory: Optional[Callable[[], requests.Session]] = None) -> Flask:
    """Create the demo Flask application.

    Args:
        config_manager: Configuration source (defaults to tracker_config.json + env)
        http_session_factory: Optional builder for the emitter's HTTP session

    Returns:
        Configured Flask application
    """
    config_manager = config_manager or ConfigManager()
    tracker_config = config_manager.get_tracker_config()
    emitter_config = config_manager.get_emitter_config()

    flask_app = Flask(__name__)

    emitter_options = emitter_config.as_options()
    emitter_options["app_id"] = tracker_config.app_id
    emitter_options["platform"] = tracker_config.platform

    initialize_defaults = {
        "namespace": tracker_config.namespace,
        "environment": tracker_config.environment,
        "endpoint": tracker_config.endpoint,
        "account_id": tracker_config.account_id,
        "source_id": tracker_config.source_id,
    }

    demo_module = create_demo_module(
        emitter_options=emitter_options,
        http_session_factory=http_session_factory,
        command_defaults={"initialize": initialize_defaults},
    )
    flask_app.extensions["demo_executor"] = demo_module["service"]

    flask_app.register_blueprint(demo_module["blueprint"])

    @flask_app.route("/health", methods=["GET"])
    def health():
        """Health check."""
        return jsonify({"status": "ok"})

    return flask_app


app = create_app()
