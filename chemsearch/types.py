from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Index = atomic number.
_ELEMENT_SYMBOLS = (
    "X H He Li Be B C N O F Ne Na Mg Al Si P S Cl Ar K Ca Sc Ti V Cr Mn Fe Co Ni "
    "Cu Zn Ga Ge As Se Br Kr Rb Sr Y Zr Nb Mo Tc Ru Rh Pd Ag Cd In Sn Sb Te I Xe "
    "Cs Ba La Ce Pr Nd Pm Sm Eu Gd Tb Dy Ho Er Tm Yb Lu Hf Ta W Re Os Ir Pt Au Hg "
    "Tl Pb Bi Po At Rn Fr Ra Ac Th Pa U Np Pu Am Cm Bk Cf Es Fm Md No Lr Rf Db Sg "
    "Bh Hs Mt Ds Rg Cn Nh Fl Mc Lv Ts Og"
).split()


def element_symbol(atomic_number: int) -> str:
    if 0 < atomic_number < len(_ELEMENT_SYMBOLS):
        return _ELEMENT_SYMBOLS[atomic_number]
    return "X"


class Coordinates(BaseModel):
    """Parallel coordinate arrays of a single conformer."""

    x: List[float] = Field(default_factory=list)
    y: List[float] = Field(default_factory=list)
    z: List[float] = Field(default_factory=list)


class BondTopology(BaseModel):
    """Bonds as two parallel atom-id arrays plus bond order."""

    aid1: List[int] = Field(default_factory=list)
    aid2: List[int] = Field(default_factory=list)
    order: List[int] = Field(default_factory=list)


class CompoundGeometry(BaseModel):
    """3D structure payload consumed by the model viewer."""

    coords: Coordinates
    bonds: BondTopology = Field(default_factory=BondTopology)
    elements: List[int] = Field(default_factory=list, description="Atomic numbers.")
    has_3d_model: bool = False

    @property
    def atom_count(self) -> int:
        return len(self.elements)

    @property
    def bond_count(self) -> int:
        return len(self.bonds.aid1)

    def to_xyz(self, title: str = "") -> str:
        """Render the conformer as XYZ text."""

        lines = [str(self.atom_count), title]
        for idx, number in enumerate(self.elements):
            lines.append(
                f"{element_symbol(number):<2} "
                f"{self.coords.x[idx]:>10.4f} {self.coords.y[idx]:>10.4f} {self.coords.z[idx]:>10.4f}"
            )
        return "\n".join(lines) + "\n"


class CompoundRecord(BaseModel):
    """Resolved compound, filled in as the detail fetches settle."""

    cid: Optional[int] = None
    name: Optional[str] = None
    formula: Optional[str] = None
    weight: Optional[float] = None
    image_url: Optional[str] = None
    geometry: Optional[CompoundGeometry] = None


# Field name -> value, restricted to the fields one detail fetch owns.
CompoundUpdate = Dict[str, Any]


class SessionSnapshot(BaseModel):
    """Read-only view of a search session for the presentation layer."""

    query: str = ""
    debounced_query: str = ""
    suggestions: List[str] = Field(default_factory=list)
    compound: Optional[CompoundRecord] = None
    is_loading: bool = False
    error: Optional[str] = None


class QueryText(BaseModel):
    """Text sent by the presentation layer for a session."""

    text: str = Field(default="", max_length=200)


class SubmitRequest(BaseModel):
    """Explicit submission; ``text`` overrides the session's live query."""

    text: Optional[str] = Field(default=None, max_length=200)


class SessionCreated(BaseModel):
    session_id: str
