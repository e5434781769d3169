#!/usr/bin/env python3
"""FastAPI server entry point for the web search service."""

import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="WebSearch FastAPI Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--config", default=None, help="Settings YAML (overrides WEBSEARCH_CONFIG)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Application log level (overrides LOG_LEVEL)",
    )

    args = parser.parse_args()

    # Read by the app process, including reload workers
    if args.config:
        os.environ["WEBSEARCH_CONFIG"] = args.config
    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level

    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
