"""Pytest configuration and fixtures."""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from chemsearch.config import SearchSettings
from chemsearch.pubchem import LookupFault, LookupService, preview_image_url
from chemsearch.session import SearchSession
from chemsearch.types import BondTopology, CompoundGeometry, Coordinates

ASPIRIN_GEOMETRY = CompoundGeometry(
    coords=Coordinates(x=[1.2333, -0.6952, 0.7958], y=[0.554, -2.7148, -2.1843], z=[0.7792, -0.7502, 0.8685]),
    bonds=BondTopology(aid1=[1, 1], aid2=[2, 3], order=[1, 2]),
    elements=[8, 8, 6],
    has_3d_model=True,
)

COMPOUNDS: Dict[str, Dict[str, Any]] = {
    "aspirin": {
        "cid": 2244,
        "name": "Aspirin",
        "formula": "C9H8O4",
        "weight": 180.16,
        "geometry": ASPIRIN_GEOMETRY,
    },
    "caffeine": {
        "cid": 2519,
        "name": "Caffeine",
        "formula": "C8H10N4O2",
        "weight": 194.19,
        "geometry": None,
    },
}


class FakeLookupService(LookupService):
    """In-memory lookup service.

    ``gates`` maps an operation name, or ``"operation:argument"``, to an
    event the call waits on before answering. Operations listed in
    ``failing`` raise a transport error.
    """

    def __init__(
        self,
        suggestions: Optional[Dict[str, List[str]]] = None,
        failing: Tuple[str, ...] = (),
    ):
        self.suggestions = suggestions or {}
        self.failing = set(failing)
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[Tuple[str, Any]] = []

    def gate(self, key: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[key] = event
        return event

    def called(self, operation: str) -> List[Any]:
        return [arg for op, arg in self.calls if op == operation]

    async def _enter(self, operation: str, arg: Any) -> None:
        self.calls.append((operation, arg))
        for key in (f"{operation}:{arg}", operation):
            gate = self.gates.get(key)
            if gate is not None:
                await gate.wait()
        if operation in self.failing:
            raise httpx.ConnectError(f"{operation} unavailable")

    def _by_cid(self, cid: int) -> Dict[str, Any]:
        for compound in COMPOUNDS.values():
            if compound["cid"] == cid:
                return compound
        raise LookupFault(f"Unknown cid {cid}")

    async def autocomplete(self, text: str, limit: int = 5) -> List[str]:
        await self._enter("autocomplete", text)
        return self.suggestions.get(text, [])[:limit]

    async def resolve_identifier(self, name: str) -> int:
        await self._enter("resolve_identifier", name)
        compound = COMPOUNDS.get(name.lower())
        if compound is None:
            raise LookupFault(f"No CID found for {name}")
        return compound["cid"]

    async def fetch_description(self, cid: int) -> Optional[str]:
        await self._enter("fetch_description", cid)
        return self._by_cid(cid)["name"]

    async def fetch_properties(self, cid: int) -> Optional[Tuple[str, float]]:
        await self._enter("fetch_properties", cid)
        compound = self._by_cid(cid)
        return compound["formula"], compound["weight"]

    async def fetch_3d_record(self, cid: int) -> Optional[CompoundGeometry]:
        await self._enter("fetch_3d_record", cid)
        return self._by_cid(cid)["geometry"]

    def preview_image_url(self, cid: int) -> str:
        self.calls.append(("preview_image_url", cid))
        if "preview_image_url" in self.failing:
            raise ValueError("no image template")
        return preview_image_url(cid)


async def settle(rounds: int = 10) -> None:
    """Let ready tasks run without advancing any timers meaningfully."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def fake_service() -> FakeLookupService:
    return FakeLookupService(suggestions={"asp": ["aspirin", "aspartame", "asparagine"]})


@pytest.fixture
def search_settings() -> SearchSettings:
    return SearchSettings(debounce_ms=20, suggestion_limit=5)


@pytest.fixture
def make_session(
    fake_service: FakeLookupService, search_settings: SearchSettings
) -> Callable[[], SearchSession]:
    def factory() -> SearchSession:
        return SearchSession(fake_service, search_settings)

    return factory
