#!/usr/bin/env python3
"""
/**
 * @file run_server.py
 * @summary Serve the CivicLens API with uvicorn.
 *
 * @details
 * - Loads .env, configures logging from LOG_LEVEL, builds the app and serves
 *   it until interrupted.
 */
"""

import argparse
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
load_dotenv()

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from civiclens.api.app import create_app
from civiclens.utils.config import Settings, setup_logging


def main():
    parser = argparse.ArgumentParser(description="CivicLens API server")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    args = parser.parse_args()

    settings = Settings.from_env()
    setup_logging(settings.log_level)

    app = create_app(settings)
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
