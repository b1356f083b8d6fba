"""Queue worker."""

from vector_ingest.workers.queue_worker import QueueWorker

__all__ = ["QueueWorker"]
