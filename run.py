#!/usr/bin/env python3
"""
Chisel Parse Source — Entry Point.

This is the main script that users run to source the content of a Chisel site
from its Parse Server into a node graph. It reads configuration from a .env
file, runs the sourcing pipeline, and saves the resulting nodes as JSON.

The sourcing pipeline (managed by SourceOrchestrator) performs 5 steps:
  1. Connect to the Parse Server (application id + master key)
  2. Source every MediaItem as a "MediaItem" node
  3. Discover the site's models and their enabled fields
  4. Source each model's published records, resolving reference and media links
  5. Save the nodes and run metadata as timestamped JSON files

Usage:
    python run.py               # Source and save JSON
    python run.py --debug       # Verbose output (includes HTTP traffic)
    python run.py --no-save     # Source without writing nodes.json
    python run.py --version     # Show version
    python run.py --env /path   # Use alternate .env file
"""

import sys
import logging
import argparse
from pathlib import Path

from core import SourceOrchestrator

# Read version from the repo-root VERSION file (e.g., "0.1.0").
VERSION_FILE = Path(__file__).resolve().parent / "VERSION"
VERSION = VERSION_FILE.read_text().strip() if VERSION_FILE.exists() else "unknown"


def main():
    """Parse CLI arguments and run the sourcing pipeline."""
    parser = argparse.ArgumentParser(
        description="Chisel Parse Source - Source Chisel content models into a node graph"
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--no-save", action="store_true", help="Do not write nodes.json")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")

    args = parser.parse_args()

    if args.version:
        print(f"chisel-parse-source {VERSION}")
        sys.exit(0)

    # Initialize the orchestrator (loads .env and builds internal config)
    orchestrator = SourceOrchestrator(env_file=args.env)

    # Apply CLI overrides on top of .env values
    if args.debug:
        orchestrator.debug = True
    if args.no_save:
        orchestrator.save_json = False

    # Show HTTP requests made through requests/urllib3 in debug mode
    if orchestrator.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        logging.getLogger("urllib3").setLevel(logging.DEBUG)

    # Print header
    print(f"\n{'='*60}")
    print(f"CHISEL PARSE SOURCE v{VERSION}")
    print("="*60)
    print(f"Server: {orchestrator.server_url}")
    print(f"Site: {orchestrator.site_id}")
    print(f"Type prefix: {orchestrator.type_name_prefix or '(none)'}")

    # Validate required configuration before proceeding
    if not orchestrator.validate_config():
        sys.exit(1)

    # Cleanup old output folders based on retention policy
    if orchestrator.output_manager.retention_days > 0:
        deleted = orchestrator.output_manager.cleanup_old_folders(orchestrator.debug)
        if deleted > 0:
            print(f"Cleaned up {deleted} old output folder(s)")

    # Run the 5-step sourcing pipeline
    results = orchestrator.run()

    # Print final summary
    orchestrator.print_summary(results)

    # Exit with error code if sourcing failed
    if not results.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
