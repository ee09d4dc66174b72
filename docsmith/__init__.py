"""Generate README files from repository metadata, local descriptors and an LLM."""

__version__ = "0.3.0"
