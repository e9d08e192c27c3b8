"""
storage.py — Payment-proof storage

Slips are not uploaded anywhere yet: the storage collaborator only hands back
a placeholder URL. A real object-storage backend plugs in by implementing
`ProofStorage.store`.
"""

import logging
from typing import Optional, Protocol

from .models import ProofFile

log = logging.getLogger(__name__)


class ProofStorage(Protocol):
    def store(self, proof: Optional[ProofFile], test_mode: bool = False) -> str:
        ...


class PlaceholderProofStorage:
    """Returns a fixed placeholder URL for every slip; nothing is persisted."""

    def __init__(self, slip_url: str, test_slip_url: str):
        self.slip_url = slip_url
        self.test_slip_url = test_slip_url

    def store(self, proof: Optional[ProofFile], test_mode: bool = False) -> str:
        if test_mode:
            return self.test_slip_url
        log.info(f"Slip '{proof.filename}' ({proof.size} bytes) not uploaded, using placeholder URL.")
        return self.slip_url
