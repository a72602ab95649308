"""Batch re-attempt of appointments whose outcome is still unknown."""

import asyncio
import dataclasses
from typing import Any, List, Optional

from loguru import logger

from ...constants import LogEmoji, Queue
from ...core.enums import BookingStatus
from ...core.infra.retry import RetryPolicy
from ...core.logger import appointment_ctx
from ...models.schemas import AppointmentRecord
from ...repositories.appointment_status_repository import AppointmentStatusRepository
from ...utils.masking import mask_name
from .form_submitter import FormSubmitter
from .results import ItemOutcome, ProcessingSummary, SubmissionResult


def _worth_retrying(result: Any) -> bool:
    """Retry failed attempts unless the page reported a terminal state."""
    if not isinstance(result, SubmissionResult):
        return True
    return not result.success and not result.already_booked and not result.status.is_terminal


class ReconciliationProcessor:
    """
    Re-submits every ``unknown`` appointment with bounded concurrency.

    Only one run per instance is active at a time; overlapping calls return
    immediately with ``skipped=True``.
    """

    def __init__(
        self,
        store: AppointmentStatusRepository,
        submitter: FormSubmitter,
        concurrency: int = Queue.CONCURRENCY,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        Initialize reconciliation processor.

        Args:
            store: Appointment status store
            submitter: Form submitter used for each attempt
            concurrency: Maximum attempts in flight
            retry_policy: Per-item retry policy
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.store = store
        self.submitter = submitter
        self.concurrency = concurrency
        policy = retry_policy or RetryPolicy()
        self.retry_policy = dataclasses.replace(policy, retry_on_result=_worth_retrying)
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        """Whether a run is currently in progress."""
        return self._run_lock.locked()

    async def process_pending(self) -> ProcessingSummary:
        """
        Process every record that is ``unknown`` at selection time.

        Never raises; a failure to read the pending set is reported through
        the summary's ``error``.

        Returns:
            ProcessingSummary of the run
        """
        if self._run_lock.locked():
            logger.info("Reconciliation already running, skipping")
            return ProcessingSummary(skipped=True)

        async with self._run_lock:
            logger.info(f"{LogEmoji.START} Starting to process unknown status appointments...")
            try:
                pending = await self.store.find_all_by_status(BookingStatus.UNKNOWN)
            except Exception as e:
                logger.error(f"Error loading pending appointments: {e}")
                return ProcessingSummary(error=str(e))

            logger.info(f"Found {len(pending)} pending appointments with unknown status")
            if not pending:
                return ProcessingSummary()

            semaphore = asyncio.Semaphore(self.concurrency)

            async def bounded(record: AppointmentRecord) -> ItemOutcome:
                async with semaphore:
                    return await self._process_one(record)

            results = await asyncio.gather(
                *(bounded(record) for record in pending), return_exceptions=True
            )

            outcomes: List[ItemOutcome] = []
            for record, result in zip(pending, results):
                if isinstance(result, BaseException):
                    logger.error(f"Unexpected error processing {record.href}: {result}")
                    outcomes.append(
                        ItemOutcome(
                            href=record.href, success=False, attempts=0, error=str(result)
                        )
                    )
                else:
                    outcomes.append(result)

            summary = ProcessingSummary.from_outcomes(outcomes)
            logger.info(
                f"{LogEmoji.STOP} Finished processing unknown appointments. "
                f"Success: {summary.success}, Failed: {summary.failed}"
            )
            return summary

    async def _process_one(self, record: AppointmentRecord) -> ItemOutcome:
        """Run the retry policy for one record and write back the outcome."""
        token = appointment_ctx.set(record.href)
        attempts = 0

        async def attempt() -> SubmissionResult:
            nonlocal attempts
            attempts += 1
            logger.info(
                f"Processing appointment for {mask_name(record.first_name, record.last_name)} "
                f"(attempt {attempts}/{self.retry_policy.max_attempts})"
            )
            return await self.submitter.submit(record.to_patient_info(), record.href)

        try:
            try:
                result = await self.retry_policy.run(attempt)
            except Exception as e:
                logger.error(f"{LogEmoji.ERROR} Error processing appointment: {e}")
                outcome = ItemOutcome(
                    href=record.href, success=False, attempts=attempts, error=str(e)
                )
            else:
                outcome = ItemOutcome(
                    href=record.href,
                    success=result.success,
                    attempts=attempts,
                    status=result.status,
                    message=result.message,
                    error=None if result.success else (result.error or result.message),
                )
                if result.success:
                    logger.info(f"{LogEmoji.SUCCESS} Successfully processed appointment")
                else:
                    logger.warning(f"Failed to process appointment: {result.message}")

            try:
                await self.store.mark_attempt(record.href, outcome.error)
            except Exception as e:
                logger.error(f"Failed to record attempt outcome: {e}")
            return outcome
        finally:
            appointment_ctx.reset(token)
