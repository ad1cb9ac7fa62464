"""Base class for externally registered scoring callbacks."""

from abc import ABC, abstractmethod

from spam_filter.models.detection import CallbackResult
from spam_filter.models.transaction import Transaction


class CustomFilter(ABC):
    """
    A scoring callback with a name.
    
    The engine only calls the instance with a transaction; any plain callable
    returning a CallbackResult (or a mapping with accept/score/message) is
    accepted as well.
    """
    
    name: str = "custom_filter"
    
    @abstractmethod
    def evaluate(self, tx: Transaction) -> CallbackResult:
        """Score a transaction."""
    
    def __call__(self, tx: Transaction) -> CallbackResult:
        return self.evaluate(tx)
