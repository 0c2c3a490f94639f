#!/usr/bin/env python3
"""
Start the GearSwap Prioritizer Web Server

Usage:
    python start_server.py [--port PORT] [--host HOST] [--resources DIR]

Example:
    python start_server.py --port 8080 --resources ~/Windower/res
"""

import argparse
import os
import sys

from settings import ENV_RESOURCES_DIR, ENV_INVENTORY

# Change to the script directory
os.chdir(os.path.dirname(os.path.abspath(__file__)))

# Add paths
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def main():
    parser = argparse.ArgumentParser(description='GearSwap Prioritizer Web Server')
    parser.add_argument('--port', type=int, default=8000, help='Port to run the server on')
    parser.add_argument('--host', type=str, default='127.0.0.1', help='Host to bind to')
    parser.add_argument('--resources', type=str, default=None, help='Directory with Windower resource .lua files')
    parser.add_argument('--inventory', type=str, default=None, help='Inventory CSV to preload')
    parser.add_argument('--reload', action='store_true', help='Enable auto-reload for development')
    args = parser.parse_args()

    # The app resolves its settings at import time
    if args.resources:
        os.environ[ENV_RESOURCES_DIR] = args.resources
    if args.inventory:
        os.environ[ENV_INVENTORY] = args.inventory

    print("=" * 60)
    print("GearSwap Prioritizer")
    print("=" * 60)
    print()
    print(f"Starting server at http://{args.host}:{args.port}")
    print(f"API Documentation at http://{args.host}:{args.port}/docs")
    print()
    print("Press Ctrl+C to stop the server.")
    print("=" * 60)

    import uvicorn
    uvicorn.run(
        "api:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )

if __name__ == "__main__":
    main()
