"""Therapy slot booking package.

Availability checking, guest form submission and reconciliation of
appointments whose outcome is still unknown.
"""

from .availability_checker import AvailabilityChecker
from .form_filler import FORM_FIELDS, FormFiller
from .form_submitter import FormSubmitter
from .page_inspector import PageInspector, PlaywrightPageInspector, SessionFactory
from .reconciliation_processor import ReconciliationProcessor
from .reconciliation_scheduler import ReconciliationScheduler
from .results import ItemOutcome, ProcessingSummary, SubmissionResult

__all__ = [
    # Operations
    "AvailabilityChecker",
    "FormSubmitter",
    "ReconciliationProcessor",
    "ReconciliationScheduler",
    # Components
    "FormFiller",
    "FORM_FIELDS",
    "PageInspector",
    "PlaywrightPageInspector",
    "SessionFactory",
    # Results
    "ItemOutcome",
    "ProcessingSummary",
    "SubmissionResult",
]
