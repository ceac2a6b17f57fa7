"""
Domain models — pydantic types for the staging pipeline.

    from javastage.core.models import Detection, Outcome, ServiceBinding, ApplicationInfo
"""

from javastage.core.models.binding import ApplicationInfo, ServiceBinding
from javastage.core.models.outcome import Detection, Outcome, Phase

__all__ = [
    # binding.py
    "ApplicationInfo",
    "ServiceBinding",
    # outcome.py
    "Detection",
    "Outcome",
    "Phase",
]
