"""Flask app exposing the cover-lookup endpoint.

Keeps the Twitch credentials on the server; clients only ever see the
resulting image URL.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request

from gamebacklog.config import Settings
from gamebacklog.igdb import IGDBAPIError, IGDBClient, IGDBError

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None, igdb: Optional[IGDBClient] = None
) -> Flask:
    """Build the proxy application.

    *igdb* is created from *settings* when omitted and credentials are set.
    """
    settings = settings or Settings.from_env()
    if igdb is None and settings.has_twitch_credentials:
        igdb = IGDBClient(settings.twitch_client_id, settings.twitch_client_secret)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.extensions["igdb"] = igdb

    @app.route("/api/igdb/cover-url", methods=["GET"])
    def cover_url():
        title = (request.args.get("title") or "").strip()
        if not title:
            return jsonify({"error": "Missing title"}), 400
        client = app.extensions["igdb"]
        if client is None:
            return jsonify({"error": "Server missing Twitch credentials"}), 500

        try:
            lookup = client.find_cover(title)
        except IGDBAPIError as exc:
            logger.warning("IGDB lookup failed for %r: %s", title, exc)
            return jsonify({"error": str(exc), "detail": exc.detail}), 502
        except IGDBError as exc:
            logger.warning("IGDB lookup failed for %r: %s", title, exc)
            return jsonify({"error": str(exc)}), 502
        return jsonify(lookup.to_dict())

    return app
