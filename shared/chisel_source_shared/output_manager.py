"""
Output Manager — Timestamped output directories and retention cleanup.

Each sourcing run creates a folder under the base output directory with the
format: YYYYMMDD_HHMM_{run_label} (e.g., "20261019_1430_Chisel_Parse_Source").

Inside each folder, the orchestrator saves:
  - nodes.json:              Every node committed to the node store
  - sourcing_results.json:   Run metadata, node counts per type, errors

The retention policy deletes folders older than OUTPUT_RETENTION_DAYS at the
start of each run (before creating a new folder). Set retention_days=0 to keep
all output indefinitely. Only folders matching the timestamp pattern are ever
deleted.
"""

import json
import os
import re
import shutil
from datetime import datetime, timedelta
from typing import Any

from .node_store import json_default

FOLDER_PATTERN = re.compile(r'^(\d{8})_(\d{4})_.*$')


class OutputManager:
    """Manages output directories with timestamping and retention policies.

    Attributes:
        base_dir: Root output directory (default: ./output).
        run_label: Used in folder naming (sanitized to alphanumeric, '-' and '_').
        retention_days: Delete folders older than this many days (0 = keep forever).
        current_dir: Path to the current run's output directory (None until created).
    """

    def __init__(self, base_dir: str, run_label: str, retention_days: int = 30):
        self.base_dir = base_dir
        self.run_label = run_label
        self.retention_days = retention_days
        self.current_dir = None
        self._run_timestamp = datetime.now()

    def create_timestamped_dir(self) -> str:
        """Create (if needed) and return the current run's output directory."""
        timestamp = self._run_timestamp.strftime("%Y%m%d_%H%M")
        safe_label = "".join(
            c if c.isalnum() or c in '-_' else '_'
            for c in self.run_label
        )
        self.current_dir = os.path.join(self.base_dir, f"{timestamp}_{safe_label}")
        os.makedirs(self.current_dir, exist_ok=True)
        return self.current_dir

    def cleanup_old_folders(self, debug: bool = False) -> int:
        """Remove run folders older than retention_days.

        Returns:
            The number of folders deleted.
        """
        if self.retention_days <= 0 or not os.path.exists(self.base_dir):
            return 0

        deleted_count = 0
        cutoff_date = datetime.now() - timedelta(days=self.retention_days)

        for folder_name in sorted(os.listdir(self.base_dir)):
            folder_path = os.path.join(self.base_dir, folder_name)
            match = FOLDER_PATTERN.match(folder_name)
            if not match or not os.path.isdir(folder_path):
                continue

            try:
                folder_datetime = datetime.strptime(
                    f"{match.group(1)}_{match.group(2)}", "%Y%m%d_%H%M"
                )
                if folder_datetime < cutoff_date:
                    shutil.rmtree(folder_path)
                    deleted_count += 1
                    if debug:
                        print(f"  Deleted old output folder: {folder_name}")
            except (ValueError, OSError) as e:
                if debug:
                    print(f"  Warning: Could not process folder {folder_name}: {e}")

        return deleted_count

    def get_output_path(self, filename: str) -> str:
        """Return the full path of a file in the current output directory.

        Raises:
            RuntimeError: If create_timestamped_dir() has not been called yet.
        """
        if not self.current_dir:
            raise RuntimeError("Output directory not created. Call create_timestamped_dir() first.")
        return os.path.join(self.current_dir, filename)

    def write_json(self, filename: str, data: Any) -> str:
        """Write data as indented JSON into the current output directory.

        Datetimes are written as ISO-8601 and Parse values in their REST form.

        Returns:
            The path written.
        """
        path = self.get_output_path(filename)
        with open(path, "w") as f:
            json.dump(data, f, indent=2, default=json_default)
        return path
