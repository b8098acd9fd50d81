"""
Compound search controller.

This package exposes the debounced suggestion engine, the name → cid →
detail resolution pipeline and the session state machine that ties them
together, along with the PubChem client and typing utilities.
"""

from .pubchem import LookupFault, LookupService, PubChemClient
from .resolve import CompoundResolver, merge_updates
from .session import SearchSession
from .types import (
    BondTopology,
    CompoundGeometry,
    CompoundRecord,
    Coordinates,
    SessionSnapshot,
)

__all__ = [
    "LookupFault",
    "LookupService",
    "PubChemClient",
    "CompoundResolver",
    "merge_updates",
    "SearchSession",
    "BondTopology",
    "CompoundGeometry",
    "CompoundRecord",
    "Coordinates",
    "SessionSnapshot",
]
