from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from .pubchem import LookupService
from .types import CompoundRecord, CompoundUpdate

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[CompoundUpdate], None]


def merge_updates(base: CompoundRecord, updates: Iterable[CompoundUpdate]) -> CompoundRecord:
    """Combine partial updates that own disjoint fields into ``base``."""

    combined: CompoundUpdate = {}
    for update in updates:
        overlap = combined.keys() & update.keys()
        if overlap:
            raise ValueError(f"Detail updates overlap on fields: {sorted(overlap)}")
        combined.update(update)
    return base.model_copy(update=combined)


class CompoundResolver:
    """Resolves a name to a cid, then fans out to the detail lookups."""

    def __init__(self, service: LookupService):
        self.service = service

    async def resolve_identifier(self, name: str) -> Optional[int]:
        try:
            return await self.service.resolve_identifier(name)
        except Exception as exc:
            logger.info("Could not resolve compound %r: %s", name, exc)
            return None

    async def resolve(
        self,
        name: str,
        on_identifier: Optional[Callable[[int], None]] = None,
        on_update: Optional[UpdateCallback] = None,
    ) -> Optional[CompoundRecord]:
        cid = await self.resolve_identifier(name)
        if cid is None:
            return None
        if on_identifier:
            on_identifier(cid)
        updates = await self.fetch_details(cid, on_update=on_update)
        return merge_updates(CompoundRecord(cid=cid), updates)

    async def fetch_details(
        self, cid: int, on_update: Optional[UpdateCallback] = None
    ) -> List[CompoundUpdate]:
        """Run every detail lookup concurrently and wait for all of them."""

        steps = [
            ("name", self._fetch_name),
            ("geometry", self._fetch_geometry),
            ("properties", self._fetch_formula_and_weight),
            ("image", self._image_url),
        ]

        async def run_step(label: str, step: Callable[[int], Awaitable[CompoundUpdate]]) -> CompoundUpdate:
            try:
                update = await step(cid)
            except Exception as exc:
                logger.warning("Fetching %s for cid %s failed: %s", label, cid, exc)
                update = {}
            if update and on_update:
                on_update(update)
            return update

        return list(await asyncio.gather(*(run_step(label, step) for label, step in steps)))

    async def _fetch_name(self, cid: int) -> CompoundUpdate:
        name = await self.service.fetch_description(cid)
        return {"name": name} if name else {}

    async def _fetch_geometry(self, cid: int) -> CompoundUpdate:
        geometry = await self.service.fetch_3d_record(cid)
        return {"geometry": geometry} if geometry else {}

    async def _fetch_formula_and_weight(self, cid: int) -> CompoundUpdate:
        properties = await self.service.fetch_properties(cid)
        if properties is None:
            return {}
        formula, weight = properties
        return {"formula": formula, "weight": weight}

    async def _image_url(self, cid: int) -> CompoundUpdate:
        return {"image_url": self.service.preview_image_url(cid)}
