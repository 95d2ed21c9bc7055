"""
Local usage hook sink for pointing runs at a stub endpoint.

Usage:
    usagehook sink --port 9090

Then run with --endpoint http://127.0.0.1:9090/api/usage/hook
"""
import json
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request

logger = structlog.get_logger(__name__)

HOOK_PATH = "/api/usage/hook"


def create_app() -> FastAPI:
    """Build a sink app with its own in-memory delivery log."""
    app = FastAPI(title="Usage Hook Sink", version="0.1.0")
    deliveries: list[dict[str, Any]] = []
    app.state.deliveries = deliveries

    @app.post(HOOK_PATH)
    async def receive_usage(request: Request) -> dict[str, Any]:
        """Record a usage event delivery."""
        cli_version = request.headers.get("x-cli-version")
        if not cli_version:
            raise HTTPException(status_code=400, detail="Missing X-CLI-Version header")

        body_bytes = await request.body()
        try:
            body = json.loads(body_bytes)
        except ValueError:
            body = {"raw": body_bytes.decode("utf-8", errors="replace")}

        deliveries.append(
            {
                "received_at": datetime.now(timezone.utc).isoformat(),
                "cli_version": cli_version,
                "content_length": request.headers.get("content-length"),
                "body": body,
            }
        )
        logger.info(
            "sink_delivery_received",
            cli_version=cli_version,
            interaction_hash=body.get("interaction_hash") if isinstance(body, dict) else None,
        )
        return {"ok": True}

    @app.get("/deliveries")
    async def list_deliveries() -> dict[str, Any]:
        return {"deliveries": deliveries}

    @app.delete("/deliveries")
    async def clear_deliveries() -> dict[str, int]:
        count = len(deliveries)
        deliveries.clear()
        return {"cleared": count}

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "running", "deliveries_received": len(deliveries)}

    return app


def serve(host: str = "127.0.0.1", port: int = 9090) -> None:
    import uvicorn

    logger.info("sink_starting", endpoint=f"http://{host}:{port}{HOOK_PATH}")
    uvicorn.run(create_app(), host=host, port=port)
