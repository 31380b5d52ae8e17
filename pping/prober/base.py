# pping/prober/base.py
from abc import ABC, abstractmethod

from pping.resolver import Resolver
from pping.schemas import ProbeEvent

class Prober(ABC):
    @abstractmethod
    def probe_once(self, payload: bytes, seq: int, resolver: Resolver) -> ProbeEvent:
        """Run exactly one connect/write(/read) attempt and return a ProbeEvent dict."""
        raise NotImplementedError
