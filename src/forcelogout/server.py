"""HTTP surface for triggering a bulk logout.

The logout endpoint is gated twice: it answers 403 unless logging out is
enabled in the server configuration, and 401 unless the request carries the
shared API secret.
"""

import asyncio
import hmac
import logging
from typing import Callable, Iterable, Optional

from flask import Flask, jsonify, request

from .bulk.batch import BatchOptions, run_batch_logout
from .identity.base import IdentityService
from .utils.config import ServerConfig

logger = logging.getLogger(__name__)

SERVICE_NAME = "forcelogout"


def _is_authorized(server_config: ServerConfig) -> bool:
    secret = server_config.api_secret
    if not secret:
        return False
    provided = request.args.get("key") or request.headers.get("X-API-Key")
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), secret.encode("utf-8"))


def _wants_immediate() -> bool:
    body = request.get_json(silent=True)
    if isinstance(body, dict) and body.get("immediate") is True:
        return True
    return request.args.get("immediate", "").lower() == "true"


def create_app(
    server_config: ServerConfig,
    identity_factory: Callable[[], IdentityService],
    excluded_ids: Iterable[str] = (),
    options: Optional[BatchOptions] = None,
) -> Flask:
    """Application factory for the logout service.

    Args:
        server_config: Gating flag, API secret and bind address
        identity_factory: Builds the identity service for each run
        excluded_ids: User IDs every run leaves alone
        options: Batch tunables passed to each run

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    excluded = frozenset(excluded_ids)
    app.config["FORCELOGOUT_SERVER"] = server_config

    @app.get("/")
    def health():
        return jsonify(
            {
                "status": "ok",
                "service": SERVICE_NAME,
                "logout_enabled": server_config.logout_enabled,
            }
        )

    @app.post("/force-logout")
    def force_logout():
        if not server_config.logout_enabled:
            logger.warning("Logout request rejected: logout is disabled")
            return jsonify({"status": "error", "message": "Logout is disabled"}), 403

        if not _is_authorized(server_config):
            logger.warning("Logout request rejected: invalid API key from %s", request.remote_addr)
            return jsonify({"status": "error", "message": "Unauthorized"}), 401

        immediate = _wants_immediate()
        logger.info("Logout requested over HTTP (immediate=%s)", immediate)

        try:
            identity = identity_factory()
            report = asyncio.run(
                run_batch_logout(
                    identity,
                    excluded_ids=excluded,
                    hard_mode=immediate,
                    options=options,
                )
            )
        except Exception as e:
            logger.error("Logout run failed: %s", e, exc_info=True)
            return (
                jsonify({"status": "error", "message": "Logout process failed", "error": str(e)}),
                500,
            )

        return jsonify(
            {
                "status": "success",
                "message": "Logout process completed",
                "details": report.to_dict(),
            }
        )

    return app
