"""clusterdiff command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``clusterdiff`` script).
"""

from clusterdiff.cli.main import cli

__all__ = ["cli"]
