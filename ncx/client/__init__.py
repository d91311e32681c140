"""Tarayıcı tarafı push sözleşmesi: kayıt akışı ve service worker olayları."""
from .capability import PushCapability, detect_capability
from .enrollment import EnrollmentClient, EnrollmentState
from .service_worker import ServiceWorkerHandler

__all__ = [
    "EnrollmentClient",
    "EnrollmentState",
    "PushCapability",
    "ServiceWorkerHandler",
    "detect_capability",
]
