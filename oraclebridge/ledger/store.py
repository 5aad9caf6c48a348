"""
Ledger Store Module

Purpose: Append-only receipt log a bridge writes its outcomes to

A bridge with a ledger appends the success receipt of every operation it
commits and the anomaly receipt of every operation it rejects. Appends
made inside transaction() are cut off again if the block raises, so an
operation that is rolled back leaves no success receipt behind.

Receipt: none (stores receipts emitted elsewhere)
Gate: t24h
"""

import json
import os
from contextlib import contextmanager

from oraclebridge.core import dual_hash
from oraclebridge.constants import DEFAULT_LEDGER_PATH


class LedgerStore:
    """
    Append-only JSONL ledger of bridge receipts.
    """

    def __init__(self, path: str = DEFAULT_LEDGER_PATH):
        """
        Initialize ledger store.

        Args:
            path: Path to ledger file, created if missing
        """
        self.path = path
        if not os.path.exists(path):
            open(path, "a").close()

    def append(self, receipt: dict) -> str:
        """
        Append one receipt as a JSON line.

        Returns:
            Dual hash of the stored line
        """
        line = json.dumps(receipt, sort_keys=True)
        with open(self.path, "a") as f:
            f.write(line + "\n")
        return dual_hash(line)

    def size(self) -> int:
        return os.path.getsize(self.path)

    @contextmanager
    def transaction(self):
        """Drop everything appended inside the block if it raises."""
        mark = self.size()
        try:
            yield self
        except Exception:
            with open(self.path, "r+") as f:
                f.truncate(mark)
            raise

    def read_all(self) -> list[dict]:
        """
        Every stored receipt, oldest first.

        A torn trailing line (crash mid-append) is skipped.
        """
        receipts = []
        with open(self.path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    receipts.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
        return receipts
