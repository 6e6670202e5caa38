"""
Demo routes

Flask routes standing in for the demo screen: one POST per button plus the
log list and tracker status.
"""

from typing import Dict, Optional

from flask import Blueprint, jsonify, request

from .commands import COMMANDS, build_command
from .executor import CommandExecutor, CommandStatus

_STATUS_CODES = {
    CommandStatus.OK: 200,
    CommandStatus.NOT_READY: 409,
    CommandStatus.ERROR: 400,
}


def create_demo_routes(executor: CommandExecutor, command_defaults: Optional[Dict[str, dict]] = None) -> Blueprint:
    """Create demo routes blueprint.

    Args:
        executor: Executor the commands are handed to
        command_defaults: Per-command field values applied beneath the request body
    """
    command_defaults = command_defaults or {}
    bp = Blueprint('demo', __name__, url_prefix='/api/demo')

    @bp.route('/commands', methods=['GET'])
    def list_commands():
        """List available command names."""
        return jsonify({"commands": sorted(COMMANDS)})

    @bp.route('/commands/<name>', methods=['POST'])
    def run_command(name: str):
        """
        Run a demo command.

        The optional JSON body overrides the command's default fields, e.g.
        ``{"name": "Checkout"}`` for ``screen_view``.
        """
        if name not in COMMANDS:
            return jsonify({"error": f"unknown command '{name}'"}), 404

        overrides = request.get_json(silent=True) or {}
        if not isinstance(overrides, dict):
            return jsonify({"error": "request body must be a JSON object"}), 400

        try:
            command = build_command(name, {**command_defaults.get(name, {}), **overrides})
        except (TypeError, ValueError) as exc:
            return jsonify({"error": str(exc)}), 400

        outcome = executor.execute(command)
        return jsonify(outcome.to_dict()), _STATUS_CODES[outcome.status]

    @bp.route('/logs', methods=['GET'])
    def get_logs():
        """Get the numbered log lines."""
        lines = executor.log.lines()
        return jsonify({"logs": lines, "count": len(lines)})

    @bp.route('/logs', methods=['DELETE'])
    def clear_logs():
        """Clear the log lines."""
        executor.log.clear()
        return jsonify({"status": "ok"})

    @bp.route('/status', methods=['GET'])
    def get_status():
        """Get tracker status."""
        return jsonify(executor.status())

    return bp
