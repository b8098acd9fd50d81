from __future__ import annotations

import abc
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from .config import PubChemSettings
from .types import BondTopology, CompoundGeometry, Coordinates

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 300


class LookupFault(LookupError):
    """Raised when the lookup service reports a fault or returns no identifier."""


def preview_image_url(cid: int, image_url: str = PubChemSettings.image_url) -> str:
    return f"{image_url}?cid={cid}&width={PREVIEW_SIZE}&height={PREVIEW_SIZE}"


def parse_3d_record(payload: Dict[str, Any]) -> Optional[CompoundGeometry]:
    """Extract the first conformer, bonds and elements from a 3D record."""

    compounds = payload.get("PC_Compounds")
    if not compounds:
        return None
    compound = compounds[0]
    conformer = compound["coords"][0]["conformers"][0]
    bonds = compound.get("bonds") or {}
    return CompoundGeometry(
        coords=Coordinates(x=conformer["x"], y=conformer["y"], z=conformer["z"]),
        bonds=BondTopology(
            aid1=bonds.get("aid1", []),
            aid2=bonds.get("aid2", []),
            order=bonds.get("order", []),
        ),
        elements=compound["atoms"]["element"],
        has_3d_model=True,
    )


class LookupService(abc.ABC):
    """Remote compound lookup operations used by the search controller."""

    @abc.abstractmethod
    async def autocomplete(self, text: str, limit: int = 5) -> List[str]:
        raise NotImplementedError

    @abc.abstractmethod
    async def resolve_identifier(self, name: str) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_description(self, cid: int) -> Optional[str]:
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_properties(self, cid: int) -> Optional[Tuple[str, float]]:
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_3d_record(self, cid: int) -> Optional[CompoundGeometry]:
        raise NotImplementedError

    def preview_image_url(self, cid: int) -> str:
        return preview_image_url(cid)


class PubChemClient(LookupService):
    """PUG-REST implementation over httpx."""

    def __init__(
        self,
        settings: Optional[PubChemSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or PubChemSettings()
        self.transport = transport

    async def autocomplete(self, text: str, limit: int = 5) -> List[str]:
        url = f"{self.settings.autocomplete_url}/compound/{quote(text, safe='')}/json"
        payload = await self._get_json(url, params={"limit": limit})
        terms = (payload.get("dictionary_terms") or {}).get("compound")
        if payload.get("total", 0) > 0 and terms:
            return list(terms)
        return []

    async def resolve_identifier(self, name: str) -> int:
        url = f"{self.settings.base_url}/compound/name/{quote(name, safe='')}/record/JSON/"
        payload = await self._get_json(url)
        compounds = payload.get("PC_Compounds") or [{}]
        id_path = (compounds[0].get("id") or {}).get("id") or {}
        cid = id_path.get("cid")
        if cid is None:
            raise LookupFault(f"No compound identifier for {name!r}")
        return int(cid)

    async def fetch_description(self, cid: int) -> Optional[str]:
        url = f"{self.settings.base_url}/compound/cid/{cid}/description/JSON"
        payload = await self._get_json(url)
        information = (payload.get("InformationList") or {}).get("Information") or []
        if not information:
            return None
        return information[0].get("Title")

    async def fetch_properties(self, cid: int) -> Optional[Tuple[str, float]]:
        url = (
            f"{self.settings.base_url}/compound/cid/{cid}"
            "/property/MolecularFormula,MolecularWeight/JSON/"
        )
        payload = await self._get_json(url)
        properties = (payload.get("PropertyTable") or {}).get("Properties") or []
        if not properties:
            return None
        formula = properties[0].get("MolecularFormula")
        weight = properties[0].get("MolecularWeight")
        if formula is None or weight is None:
            return None
        # PubChem serialises the weight as a string.
        return str(formula), float(weight)

    async def fetch_3d_record(self, cid: int) -> Optional[CompoundGeometry]:
        url = f"{self.settings.base_url}/compound/cid/{cid}/record/JSON/"
        payload = await self._get_json(
            url, params={"record_type": "3d", "response_type": "display"}
        )
        return parse_3d_record(payload)

    def preview_image_url(self, cid: int) -> str:
        return preview_image_url(cid, self.settings.image_url)

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {"User-Agent": self.settings.user_agent, "Accept": "application/json"}
        async with httpx.AsyncClient(
            timeout=self.settings.timeout_seconds, transport=self.transport
        ) as client:
            response = await client.get(url, params=params, headers=headers)
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected payload from {url}")
        fault = payload.get("Fault")
        if fault:
            message = fault.get("Message", "unknown fault") if isinstance(fault, dict) else fault
            raise LookupFault(f"{message} ({response.status_code})")
        response.raise_for_status()
        return payload
