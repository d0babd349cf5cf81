"""clusterdiff: correlate live cloud and registry state with a desired cluster topology."""

__version__ = "0.3.0"
