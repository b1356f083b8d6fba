"""Polling worker that drives queue items through the pipeline."""

import asyncio
import contextlib
from typing import Any, Dict, Optional

from vector_ingest.models.queue import ProcessingResult, QueueStatus
from vector_ingest.services.metadata_store import MetadataStore
from vector_ingest.services.processing_service import DocumentProcessingService
from vector_ingest.utils.logging import get_logger, log_error

logger = get_logger("queue_worker")

CANCELLED_MESSAGE = "Processing cancelled during shutdown"


class QueueWorker:
    """
    Poll the queue table and process one file at a time.

    Each iteration takes the oldest ``queued`` item, moves it to
    ``processing``, runs the pipeline and records ``success`` or ``error``.
    The worker is the only place pipeline errors are caught; the failure
    message ends up in ``last_error``.

    Claiming is read-then-update without locking, so only one worker may
    poll a given database.

    ``stop`` is observed between iterations: an item in flight runs to its
    terminal status. If the task is cancelled while an item is in flight,
    the item is recorded as ``error`` before the cancellation propagates.
    """

    def __init__(
        self,
        metadata_store: MetadataStore,
        processing_service: DocumentProcessingService,
        poll_interval: float = 5.0,
    ):
        """
        Initialize queue worker.

        Args:
            metadata_store: Queue and chunk persistence
            processing_service: Pipeline run for each claimed item
            poll_interval: Seconds to sleep after every iteration
        """
        self.metadata_store = metadata_store
        self.processing_service = processing_service
        self.poll_interval = poll_interval
        self._running = False
        self._stop_event = asyncio.Event()

    async def start(self) -> None:
        """Run the poll loop until ``stop`` is called. No-op if already running."""
        if self._running:
            logger.warning("Queue worker is already running")
            return

        self._running = True
        self._stop_event.clear()
        logger.info(f"Queue worker started (poll_interval={self.poll_interval}s)")
        try:
            await self._run()
        finally:
            self._running = False
            logger.info("Queue worker stopped")

    def stop(self) -> None:
        """Ask the loop to exit once the current iteration is done."""
        if not self._running:
            return
        logger.info("Stopping queue worker...")
        self._running = False
        self._stop_event.set()

    async def _run(self) -> None:
        while self._running:
            try:
                await self.process_next_item()
            except Exception as e:
                log_error(e, context={"component": "queue_worker"})
            await self._wait_for_next_poll()

    async def _wait_for_next_poll(self) -> None:
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)

    async def process_next_item(self) -> Optional[QueueStatus]:
        """
        Process the oldest queued item, if any.

        Returns:
            The terminal status written for the item, or None when the queue was empty
        """
        items = await self.metadata_store.find_queued_items()
        if not items:
            logger.debug("No queued items")
            return None

        item = items[0]
        logger.info(f"Processing queue item {item.id} (file_id={item.file_id})")
        await self.metadata_store.set_queue_status(item.id, QueueStatus.PROCESSING)

        try:
            result: ProcessingResult = await self.processing_service.process_document(item)
        except asyncio.CancelledError:
            logger.warning(f"Queue item {item.id} cancelled while processing: file_id={item.file_id}")
            await self.metadata_store.set_queue_status(
                item.id, QueueStatus.ERROR, CANCELLED_MESSAGE
            )
            raise
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(
                f"Queue item {item.id} failed: file_id={item.file_id} - {message}",
                exc_info=True,
            )
            await self.metadata_store.set_queue_status(item.id, QueueStatus.ERROR, message)
            return QueueStatus.ERROR

        await self.metadata_store.set_queue_status(item.id, QueueStatus.SUCCESS, None)
        logger.info(
            f"Queue item {item.id} succeeded: chunks={result.chunks_created}, "
            f"vectors={result.vectors_inserted}, time_ms={result.processing_time_ms}"
        )
        return QueueStatus.SUCCESS

    @property
    def is_running(self) -> bool:
        return self._running

    def status(self) -> Dict[str, Any]:
        return {"is_running": self._running, "poll_interval": self.poll_interval}
