"""
Data logging system for CSV/JSON output
Appends every disposal verdict to an audit trail on disk
"""

import csv
import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional
import threading
import time

from ..models.disposal_classifier import DisposalVerdict

CSV_HEADERS = [
    "timestamp", "datetime", "source", "raw_label", "profile_id", "decided_by",
    "type", "outcome", "recyclable", "compostable", "special", "note"
]


class DataLogger:
    """
    Handles logging of disposal verdicts to CSV and JSON Lines formats
    Thread-safe logging with configurable output formats
    """

    def __init__(self, log_dir: str = "logs", enable_csv: bool = True,
                 enable_json: bool = True):
        """
        Initialize data logger

        Args:
            log_dir: Directory for log files
            enable_csv: Enable CSV logging
            enable_json: Enable JSON Lines logging
        """
        self.log_dir = Path(log_dir)
        self.enable_csv = enable_csv
        self.enable_json = enable_json

        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.csv_file = self.log_dir / "classifications.csv"
        self.json_file = self.log_dir / "classifications.jsonl"

        # Thread safety
        self.lock = threading.Lock()

        self.setup_logging()
        self._initialize_csv_file()

        self.logger.info(f"Data logger initialized: {log_dir}")

    def setup_logging(self):
        """Setup logging"""
        self.logger = logging.getLogger(__name__)

    def _initialize_csv_file(self):
        """Create the CSV file with headers if it doesn't exist"""
        if not self.enable_csv or self.csv_file.exists():
            return

        with open(self.csv_file, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADERS)

    def log_verdict(self, verdict: DisposalVerdict, source: str,
                    timestamp: Optional[float] = None):
        """
        Log a single verdict

        Args:
            verdict: Classifier output
            source: Where the image came from ('upload', 'camera', 'predictions')
            timestamp: Classification timestamp, defaults to now
        """
        if timestamp is None:
            timestamp = time.time()

        entry = {
            "timestamp": timestamp,
            "datetime": datetime.fromtimestamp(timestamp).isoformat(),
            "source": source,
            "profile_id": verdict.profile_id,
            "decided_by": verdict.decided_by.value,
            "outcome": verdict.outcome.name,
            "verdict": verdict.to_dict(),
        }

        with self.lock:
            if self.enable_csv:
                self._log_csv(entry, verdict)
            if self.enable_json:
                with open(self.json_file, 'a') as f:
                    f.write(json.dumps(entry) + '\n')

        self.logger.debug(f"Logged verdict {verdict.profile_id} for '{verdict.raw_label}'")

    def _log_csv(self, entry: Dict, verdict: DisposalVerdict):
        row = [
            entry["timestamp"],
            entry["datetime"],
            entry["source"],
            verdict.raw_label,
            verdict.profile_id,
            entry["decided_by"],
            verdict.type,
            entry["outcome"],
            verdict.recyclable,
            verdict.compostable,
            verdict.special,
            verdict.note
        ]

        with open(self.csv_file, 'a', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(row)

    def get_log_statistics(self) -> Dict:
        """Get logging statistics"""
        stats = {
            "log_directory": str(self.log_dir),
            "csv_enabled": self.enable_csv,
            "json_enabled": self.enable_json,
            "files": {}
        }

        for log_file in (self.csv_file, self.json_file):
            if log_file.exists():
                stats["files"][log_file.name] = {
                    "size_bytes": log_file.stat().st_size,
                    "modified": datetime.fromtimestamp(log_file.stat().st_mtime).isoformat()
                }

        stats["total_verdicts_logged"] = 0
        if self.json_file.exists():
            with open(self.json_file, 'r') as f:
                stats["total_verdicts_logged"] = sum(1 for line in f if line.strip())

        return stats
