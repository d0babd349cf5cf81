"""Entry point for `python -m clusterdiff`.

Usage:
    python -m clusterdiff diff web-app --cache-file chef.jsonl
"""

from __future__ import annotations

from clusterdiff.cli import cli

cli()
