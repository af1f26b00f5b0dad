"""
Base class for provisioning steps.

A step performs one ordered unit of host setup. Success means apply()
returned; failure is reported by raising a PuckForgeError subclass.
"""

import logging
from abc import ABC, abstractmethod

from ..context import ProvisioningContext

logger = logging.getLogger(__name__)


class Step(ABC):
    """Abstract base class for provisioning steps."""

    #: Short label used in logs and progress output
    name: str = ""

    #: Human readable explanation shown before the step runs
    description: str = ""

    @abstractmethod
    def apply(self, context: ProvisioningContext) -> None:
        """Perform the step against the host."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
