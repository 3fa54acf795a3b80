"""Meeting Memory - ingest recorded meetings and search them semantically."""

__version__ = "1.0.0"
