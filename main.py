"""
Lead Intelligence Engine - Main Entry Point
===========================================
Run this file to start the FastAPI server.

Usage:
    python main.py                    # Start server on port 8000
    python main.py --port 8080        # Start server on custom port
    python main.py --reload           # Start with auto-reload (dev mode)
    python main.py --log-format json  # Single-line JSON logs

API Documentation:
    http://localhost:8000/docs        # Swagger UI
    http://localhost:8000/redoc       # ReDoc
"""

import argparse
import logging
import os
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from lead_engine import __version__
from lead_engine.logging_config import configure_logging

logger = logging.getLogger("lead_engine.main")


def main():
    parser = argparse.ArgumentParser(description="Lead Intelligence Engine API Server")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind the server to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL env or INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Log format (default: LOG_FORMAT env or text)",
    )

    args = parser.parse_args()

    # Worker processes re-read these when they import the app
    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level
    if args.log_format:
        os.environ["LOG_FORMAT"] = args.log_format
    configure_logging(args.log_level, args.log_format)

    logger.info(
        "Lead Intelligence Engine %s starting on http://%s:%d (docs: /docs, health: /api/health)",
        __version__, args.host, args.port,
    )

    uvicorn.run(
        "lead_engine.api.endpoints:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers if not args.reload else 1,
        log_config=None,
    )


if __name__ == "__main__":
    main()
