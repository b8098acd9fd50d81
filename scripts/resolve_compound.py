"""Resolve a compound name against PubChem and print the record."""

import argparse
import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path when executed via `python scripts/...`
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chemsearch.config import load_app_config
from chemsearch.logger import setup_logging
from chemsearch.session import SearchSession


async def resolve(name: str, config_path: str | None, xyz: bool) -> int:
    config = load_app_config(config_path)
    async with SearchSession.from_config(config) as session:
        await session.submit_query(name)
        snapshot = session.snapshot()
    if snapshot.compound is None:
        print(snapshot.error or f"No compound found for '{name}'.", file=sys.stderr)
        return 1
    print(snapshot.compound.model_dump_json(indent=2, exclude={"geometry"}))
    geometry = snapshot.compound.geometry
    if geometry is None:
        print("No 3D conformer available.")
    elif xyz:
        print(geometry.to_xyz(title=snapshot.compound.name or str(snapshot.compound.cid)), end="")
    else:
        print(f"3D model: {geometry.atom_count} atoms, {geometry.bond_count} bonds")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Resolve a compound name.")
    parser.add_argument("name", help="Compound name, e.g. aspirin.")
    parser.add_argument("--config", default=None, help="Path to app config YAML.")
    parser.add_argument("--log-level", default=None, help="Override the configured log level.")
    parser.add_argument("--xyz", action="store_true", help="Print the conformer as XYZ.")
    args = parser.parse_args()
    setup_logging(args.log_level, args.config)
    sys.exit(asyncio.run(resolve(args.name, args.config, args.xyz)))
