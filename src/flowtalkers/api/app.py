"""
Flask JSON API for FlowTalkers.

Serves the classified flow table, source catalog, top talkers and
zone lookups to the presentation layer.
"""

from __future__ import annotations

import time

from flask import Flask, jsonify, request

from ..config import Settings
from ..pipeline import ClassificationPipeline, FlowRequest, top_talkers, zone_matrix
from ..zones.classifier import ZoneClassifier


def create_app(
    pipeline: ClassificationPipeline | None = None,
    settings: Settings | None = None,
) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)

    flows = pipeline or ClassificationPipeline(settings=settings)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "healthy", "timestamp": time.time()})

    # --- Flows ---

    @app.route("/api/v1/flows", methods=["GET"])
    def flow_table():
        result = flows.run(FlowRequest.from_args(request.args))
        return jsonify(result.to_dict())

    @app.route("/api/v1/flows/talkers", methods=["GET"])
    def flow_talkers():
        n = request.args.get("n", 10, type=int)
        by = request.args.get("by", "src")
        if by not in ("src", "dst"):
            return jsonify({"error": "by must be src or dst"}), 400
        result = flows.run(FlowRequest.from_args(request.args))
        return jsonify({
            "selected_source": result.selected_source,
            "talkers": top_talkers(result, n=n, by=by),
            "error_msg": result.error_msg,
        })

    @app.route("/api/v1/flows/zones", methods=["GET"])
    def flow_zones():
        result = flows.run(FlowRequest.from_args(request.args))
        return jsonify({
            "selected_source": result.selected_source,
            "matrix": zone_matrix(result),
            "error_msg": result.error_msg,
        })

    # --- Sources ---

    @app.route("/api/v1/sources", methods=["GET"])
    def sources():
        catalog, messages = flows.discover()
        return jsonify({
            "sources": [s.to_dict() for s in catalog.values()],
            "messages": [m.to_dict() for m in messages],
        })

    # --- Zones ---

    @app.route("/api/v1/classify", methods=["POST"])
    def classify():
        data = request.get_json(silent=True) or {}
        addresses = data.get("addresses", [])
        if not isinstance(addresses, list):
            return jsonify({"error": "addresses must be a list"}), 400
        classifier = ZoneClassifier(flows.zone_table())
        return jsonify({
            "colours": {
                str(a): classifier.classify(str(a)).value for a in addresses
            },
        })

    @app.route("/api/v1/zones", methods=["GET"])
    def zones():
        return jsonify({"zones": flows.zone_table().to_list()})

    return app
