"""
Source Orchestrator — Pipeline coordination for sourcing Chisel content.

This module ties together all other modules (ParseClient, MediaPrefetcher,
SchemaLoader, RecordTransformer, NodeEmitter) into a sequential 5-step
workflow:

  Step 1: CONNECTION
      Creates the ParseClient (application id + master key headers) and calls
      GET /health to make sure the server URL is right.

  Step 2: MEDIA ITEMS
      MediaPrefetcher fetches every MediaItem record and emits it as a
      "MediaItem" node, so media fields of later models have targets.

  Step 3: SCHEMA DISCOVERY
      SchemaLoader reads the site's Model rows and, per model, its enabled
      ModelField rows, and derives each model's node type name.

  Step 4: MODEL RECORDS
      For every model in turn: query its table for records whose t__status is
      "Published", transform them with RecordTransformer, and emit them with
      NodeEmitter.

  Step 5: SAVE OUTPUT
      Writes the committed nodes and the run metadata as JSON to a
      timestamped output directory.

Steps 2-4 are also available without the console banners as source_nodes(),
the entry point a host build process calls with its own node store.

Configuration:
    All settings are loaded from environment variables (typically via .env file).
    Required: PARSE_APP_ID, PARSE_MASTER_KEY, PARSE_SERVER_URL, CHISEL_SITE_ID.
    See config/settings.py for defaults.

Typical usage:
    orchestrator = SourceOrchestrator(env_file="./.env")
    if orchestrator.validate_config():
        results = orchestrator.run()
        orchestrator.print_summary(results)
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, List, Optional

from dotenv import load_dotenv

from chisel_source_shared import InMemoryNodeStore, OutputManager

from config import DEFAULT_SETTINGS, MEDIA_ITEM_TYPE_NAME, STATUS_PROPERTY, PUBLISHED_STATUS

from .media_prefetcher import MediaPrefetcher
from .node_emitter import NodeEmitter
from .parse_client import ParseClient
from .record_transformer import RecordTransformer
from .schema import Model
from .schema_loader import SchemaLoader


@dataclass(frozen=True)
class SourceOptions:
    """The configuration a sourcing run is invoked with."""

    app_id: str
    master_key: str
    server_url: str
    site_id: str
    type_name: str = DEFAULT_SETTINGS["TYPE_NAME_PREFIX"]
    query_limit: int = DEFAULT_SETTINGS["PARSE_QUERY_LIMIT"]
    timeout: int = DEFAULT_SETTINGS["REQUEST_TIMEOUT"]


def create_client(options: SourceOptions, debug: bool = False) -> ParseClient:
    return ParseClient(
        options.server_url,
        options.app_id,
        options.master_key,
        query_limit=options.query_limit,
        timeout=options.timeout,
        debug=debug,
    )


def source_model(
    client: ParseClient,
    model: Model,
    transformer: RecordTransformer,
    emitter: NodeEmitter,
) -> List[Dict[str, Any]]:
    """Query a model's published records, transform and emit them.

    Returns:
        The emitted nodes.
    """
    records = client.find(model.table_name, {STATUS_PROPERTY: PUBLISHED_STATUS})
    payloads = transformer.transform(model, records)
    return emitter.emit_all(payloads, model.type_name)


def source_media_items(client: ParseClient, emitter: NodeEmitter, debug: bool = False) -> int:
    """Emit every MediaItem. Returns the number of media nodes."""
    return len(MediaPrefetcher(client, emitter, debug).run())


def discover_models(client: ParseClient, options: SourceOptions, debug: bool = False) -> List[Model]:
    return SchemaLoader(client, options.type_name, debug).load(options.site_id)


def source_records(
    client: ParseClient,
    models: List[Model],
    store,
    emitter: NodeEmitter,
    debug: bool = False,
) -> Dict[str, int]:
    """Source the published records of every model, in order.

    Returns:
        The number of nodes emitted per model type name.
    """
    transformer = RecordTransformer(models, store.create_node_id, debug)
    counts: Dict[str, int] = {}
    for model in models:
        counts[model.type_name] = len(source_model(client, model, transformer, emitter))
    return counts


def source_nodes(
    store,
    options: SourceOptions,
    client: Optional[ParseClient] = None,
    debug: bool = False,
) -> Dict[str, int]:
    """Source every MediaItem and every published record of the site into store.

    Args:
        store: Host node store (create_node, create_node_id, create_content_digest).
        options: Connection settings, site id and type-name prefix.
        client: Optional pre-built ParseClient; built from options when None.
        debug: Enable verbose output.

    Returns:
        The number of nodes emitted per type name.

    Raises:
        requests.HTTPError, ParseError: If any schema or record query fails.
        DuplicateTypeNameError: If two models derive the same type name.
    """
    client = client or create_client(options, debug)
    emitter = NodeEmitter(store, debug)

    counts = {MEDIA_ITEM_TYPE_NAME: source_media_items(client, emitter, debug)}
    models = discover_models(client, options, debug)
    counts.update(source_records(client, models, store, emitter, debug))
    return counts


class SourceOrchestrator:
    """Orchestrates the Chisel sourcing pipeline.

    Attributes:
        app_id: Parse application id.
        master_key: Parse master key.
        server_url: Parse Server URL (e.g., "https://chisel.example.com/parse").
        site_id: objectId of the Chisel Site to source.
        type_name_prefix: Prefix joined to every model's type name (default: "Chisel").
        query_limit: Limit sent with every Parse query.
        timeout: Per-request timeout in seconds.
        provider_name: Label used in output folder naming (default: "Chisel_Parse_Source").
        save_json: Whether to write the nodes to disk (default: True).
        debug: Whether to enable verbose output (default: False).
        store: The InMemoryNodeStore nodes are committed to.
        output_manager: Handles timestamped output directories and retention cleanup.
    """

    def __init__(self, env_file: str = "./.env"):
        """Initialize the orchestrator by loading configuration from environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}")
        else:
            print(f"Warning: {env_file} not found, using defaults/environment")

        # Parse Server connection (required)
        self.app_id = os.getenv("PARSE_APP_ID", "")
        self.master_key = os.getenv("PARSE_MASTER_KEY", "")
        self.server_url = os.getenv("PARSE_SERVER_URL", "")

        # What to source
        self.site_id = os.getenv("CHISEL_SITE_ID", "")
        self.type_name_prefix = os.getenv("TYPE_NAME_PREFIX", DEFAULT_SETTINGS["TYPE_NAME_PREFIX"])

        self.query_limit = int(os.getenv("PARSE_QUERY_LIMIT", str(DEFAULT_SETTINGS["PARSE_QUERY_LIMIT"])))
        self.timeout = int(os.getenv("REQUEST_TIMEOUT", str(DEFAULT_SETTINGS["REQUEST_TIMEOUT"])))

        # Provider name: used only for naming the output folder
        self.provider_name = os.getenv("PROVIDER_NAME", DEFAULT_SETTINGS["PROVIDER_NAME"])

        # Output directory and how many days to keep old runs
        output_dir = os.getenv("OUTPUT_DIR", DEFAULT_SETTINGS["OUTPUT_DIR"])
        retention_days = int(os.getenv("OUTPUT_RETENTION_DAYS", str(DEFAULT_SETTINGS["OUTPUT_RETENTION_DAYS"])))

        self.save_json = os.getenv("SAVE_JSON", str(DEFAULT_SETTINGS["SAVE_JSON"])).lower() == "true"
        self.debug = os.getenv("DEBUG", str(DEFAULT_SETTINGS["DEBUG"])).lower() == "true"

        self.store = InMemoryNodeStore()
        self.output_manager = OutputManager(output_dir, self.provider_name, retention_days)

    @property
    def options(self) -> SourceOptions:
        return SourceOptions(
            app_id=self.app_id,
            master_key=self.master_key,
            server_url=self.server_url,
            site_id=self.site_id,
            type_name=self.type_name_prefix,
            query_limit=self.query_limit,
            timeout=self.timeout,
        )

    def validate_config(self) -> bool:
        """Validate that all required configuration values are present.

        Returns:
            True if all required values are present, False otherwise.
            Prints specific error messages for each missing value.
        """
        errors = []
        if not self.app_id:
            errors.append("PARSE_APP_ID is required")
        if not self.master_key:
            errors.append("PARSE_MASTER_KEY is required")
        if not self.server_url:
            errors.append("PARSE_SERVER_URL is required")
        elif not self.server_url.startswith(("http://", "https://")):
            errors.append("PARSE_SERVER_URL must start with http:// or https://")
        if not self.site_id:
            errors.append("CHISEL_SITE_ID is required")
        if self.query_limit < 1:
            errors.append("PARSE_QUERY_LIMIT must be a positive number")

        if errors:
            print("\nConfiguration Errors:")
            for err in errors:
                print(f"  - {err}")
            return False
        return True

    def run(self, client: Optional[ParseClient] = None) -> Dict[str, Any]:
        """Execute the full 5-step sourcing pipeline.

        Args:
            client: Optional pre-built ParseClient (built from config when None).

        Returns:
            A dict containing:
                - started_at/completed_at: ISO timestamps
                - connector: "chisel-parse"
                - config: Server URL, site id and type-name prefix
                - success: True if all steps completed without error
                - summary: Node counts per type name
                - json_path: Path to saved nodes (if save_json=True)
                - error: Error message (if success=False)
        """
        results = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "connector": "chisel-parse",
            "config": {
                "server_url": self.server_url,
                "site_id": self.site_id,
                "type_name_prefix": self.type_name_prefix,
            },
            "success": False,
        }

        try:
            # Step 1: Connect to the Parse Server
            print(f"\n{'='*60}")
            print("STEP 1: CONNECTION")
            print("="*60)
            if client is None:
                client = create_client(self.options, self.debug)
                client.test_connection()
            print(f"  Connected to: {client.server_url}")

            emitter = NodeEmitter(self.store, self.debug)

            # Step 2: MediaItems first, so media links have targets
            print(f"\n{'='*60}")
            print("STEP 2: MEDIA ITEMS")
            print("="*60)
            counts = {MEDIA_ITEM_TYPE_NAME: source_media_items(client, emitter, self.debug)}
            print(f"  Media items: {counts[MEDIA_ITEM_TYPE_NAME]}")

            # Step 3: Discover the site's models and fields
            print(f"\n{'='*60}")
            print("STEP 3: SCHEMA DISCOVERY")
            print("="*60)
            models = discover_models(client, self.options, self.debug)
            print(f"  Models: {len(models)}")

            # Step 4: Source published records model by model
            print(f"\n{'='*60}")
            print("STEP 4: MODEL RECORDS")
            print("="*60)
            record_counts = source_records(client, models, self.store, emitter, self.debug)
            for type_name, count in record_counts.items():
                print(f"  {type_name}: {count} node(s)")
            counts.update(record_counts)

            dangling = self.store.dangling_links()
            if dangling:
                print(f"  Warning: {len(dangling)} link(s) point at nodes that were not sourced")
                if self.debug:
                    for link in dangling:
                        print(f"    {link['node']}.{link['field']} -> {link['target']}")

            # Step 5: Save output to timestamped directory
            print(f"\n{'='*60}")
            print("STEP 5: SAVE OUTPUT")
            print("="*60)

            self.output_manager.create_timestamped_dir()

            if self.save_json:
                json_path = self.output_manager.write_json("nodes.json", self.store.to_list())
                results["json_path"] = json_path
                print(f"  Saved nodes: {json_path}")

            results["success"] = True
            results["summary"] = {
                "models": len(models),
                "nodes": counts,
                "total_nodes": sum(counts.values()),
                "dangling_links": len(dangling),
            }

        except Exception as e:
            results["error"] = str(e)
            print(f"\n  ERROR: {e}")
            if self.debug:
                import traceback
                traceback.print_exc()

        results["completed_at"] = datetime.now(timezone.utc).isoformat()

        # Save run metadata alongside the nodes
        if self.output_manager.current_dir:
            results_path = self.output_manager.write_json("sourcing_results.json", results)
            print(f"\n  Results saved to: {results_path}")

        return results

    def print_summary(self, results: Dict):
        """Print a human-readable execution summary.

        Args:
            results: The dict returned by run().
        """
        print(f"\n{'='*60}")
        print("SOURCING COMPLETE")
        print("="*60)
        print(f"Status: {'SUCCESS' if results.get('success') else 'FAILED'}")

        summary = results.get("summary", {})
        if summary:
            print(f"Models: {summary.get('models', 0)}")
            for type_name, count in summary.get("nodes", {}).items():
                print(f"  {type_name}: {count}")
            print(f"Total nodes: {summary.get('total_nodes', 0)}")

        if results.get("error"):
            print(f"Error: {results['error']}")
