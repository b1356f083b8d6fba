"""Queue-driven document ingestion: chunking, embeddings and dual-store persistence."""

__version__ = "0.1.0"
