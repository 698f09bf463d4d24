"""Application ports - interfaces for external adapters."""

from notevault.application.ports.job_queue import DeadLetter, JobDelivery, JobQueue
from notevault.application.ports.notifier import DocumentNotifier
from notevault.application.ports.object_store import ObjectStore, StoredObject
from notevault.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from notevault.application.ports.watermarker import Watermarker

__all__ = [
    "DeadLetter",
    "DocumentNotifier",
    "JobDelivery",
    "JobQueue",
    "ObjectStore",
    "StoredObject",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "Watermarker",
]
