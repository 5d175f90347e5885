"""
Structured logging for wrong-field synthesis runs.

Produces:
  - manifest.json: One-time run metadata (git hash, config, derived Rns parameters)
  - ops_{name}.jsonl: Per-gadget records (op, region, offset, rows consumed)
  - failures_{name}.jsonl: Constraint failures reported by Region.verify()
  - metrics_{name}.jsonl: Timing and table-size metrics
"""

import json
import hashlib
import platform
import subprocess
import sys
import time
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, List


@dataclass
class RnsManifest:
    """Run-level metadata, saved once per run."""
    run_id: str
    timestamp: str
    git_commit: str
    config_hash: str
    node_name: str
    python_version: str
    config: Dict[str, Any]
    rns: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, path: Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


def _get_git_commit() -> str:
    """Get current git commit hash, or 'unknown'."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True, text=True, timeout=5,
        )
        return result.stdout.strip() if result.returncode == 0 else "unknown"
    except (OSError, subprocess.SubprocessError):
        return "unknown"


def _config_hash(config: Dict[str, Any]) -> str:
    """Deterministic hash of config dict."""
    s = json.dumps(config, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()[:16]


def create_manifest(run_id: str, config: Dict[str, Any], rns) -> RnsManifest:
    """Create an RnsManifest with auto-detected metadata."""
    return RnsManifest(
        run_id=run_id,
        timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        git_commit=_get_git_commit(),
        config_hash=_config_hash(config),
        node_name=platform.node(),
        python_version=sys.version,
        config=config,
        rns=rns.summary(),
    )


class SynthesisLogger:
    """Structured JSONL logger for one synthesis run.

    Writes three files:
      - ops_{name}.jsonl      (one record per gadget call)
      - failures_{name}.jsonl (verification failures)
      - metrics_{name}.jsonl  (timing / table data)
    """

    def __init__(self, output_dir: Path, name: str = "run"):
        self.output_dir = Path(output_dir)
        self.name = name

        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._ops_path = self.output_dir / f"ops_{name}.jsonl"
        self._failures_path = self.output_dir / f"failures_{name}.jsonl"
        self._metrics_path = self.output_dir / f"metrics_{name}.jsonl"

        # Open files (append mode so repeated runs accumulate)
        self._ops_f = open(self._ops_path, 'a')
        self._failures_f = open(self._failures_path, 'a')
        self._metrics_f = open(self._metrics_path, 'a')

        self._ops_count = 0
        self._rows_count = 0
        self._failures_count = 0

    def log_op(self, record: Dict[str, Any]):
        """Log one gadget call."""
        record["run"] = self.name
        record["timestamp"] = time.time()
        self._ops_f.write(json.dumps(record, default=str) + "\n")
        self._ops_count += 1
        self._rows_count += int(record.get("rows", 0))

        # Flush periodically
        if self._ops_count % 100 == 0:
            self._ops_f.flush()

    def log_failures(self, failures: List[Dict[str, Any]], region: str = ""):
        """Log the failure list returned by Region.verify()."""
        for failure in failures:
            record = dict(failure)
            record["run"] = self.name
            record["region"] = region
            record["timestamp"] = time.time()
            self._failures_f.write(json.dumps(record, default=str) + "\n")
            self._failures_count += 1
        self._failures_f.flush()

    def log_metrics(self, record: Dict[str, Any]):
        """Log timing / table metrics."""
        record["run"] = self.name
        record["timestamp"] = time.time()
        self._metrics_f.write(json.dumps(record, default=str) + "\n")
        self._metrics_f.flush()

    def close(self):
        """Flush and close all log files."""
        for f in [self._ops_f, self._failures_f, self._metrics_f]:
            f.flush()
            f.close()

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "ops_logged": self._ops_count,
            "rows_logged": self._rows_count,
            "failures_logged": self._failures_count,
        }

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
