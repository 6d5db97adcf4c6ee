"""
Molecule layout: VSEPR-style placement of atoms around a central atom,
projected onto the drawing plane.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from diagram_layout.models import Point
from diagram_layout.validation import ValidationError


class BondKind(Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"


class MolecularGeometry(Enum):
    LINEAR = "linear"
    BENT = "bent"
    TRIGONAL_PLANAR = "trigonal-planar"
    TRIGONAL_PYRAMIDAL = "trigonal-pyramidal"
    TETRAHEDRAL = "tetrahedral"
    TRIGONAL_BIPYRAMIDAL = "trigonal-bipyramidal"
    OCTAHEDRAL = "octahedral"


# Number of ligand positions each geometry can place
_CAPACITY: dict[MolecularGeometry, int] = {
    MolecularGeometry.LINEAR: 2,
    MolecularGeometry.BENT: 2,
    MolecularGeometry.TRIGONAL_PLANAR: 3,
    MolecularGeometry.TRIGONAL_PYRAMIDAL: 3,
    MolecularGeometry.TETRAHEDRAL: 4,
    MolecularGeometry.TRIGONAL_BIPYRAMIDAL: 5,
    MolecularGeometry.OCTAHEDRAL: 6,
}

# CPK coloring convention
_CPK_COLORS = {
    "H": "#ffffff",
    "C": "#343a40",
    "N": "#364fc7",
    "O": "#c92a2a",
    "F": "#2b8a3e",
    "P": "#f76707",
    "S": "#f59f00",
    "Cl": "#2b8a3e",
    "Br": "#a61e4d",
    "I": "#5f3dc4",
}
_DEFAULT_COLOR = "#868e96"

ATOM_RADIUS = 40
BOND_LENGTH = 100


@dataclass
class AtomSpec:
    symbol: str
    id: str
    bond: BondKind = BondKind.SINGLE


@dataclass
class MoleculeStructure:
    central: AtomSpec
    surrounding: list[AtomSpec]
    geometry: MolecularGeometry


@dataclass
class PlacedAtom:
    id: str
    symbol: str
    center: Point
    radius: float
    color: str
    bond: BondKind = BondKind.SINGLE


@dataclass
class Bond:
    source: str
    target: str
    kind: BondKind


@dataclass
class MoleculeLayout:
    atoms: list[PlacedAtom] = field(default_factory=list)
    bonds: list[Bond] = field(default_factory=list)


def cpk_color(symbol: str) -> str:
    return _CPK_COLORS.get(symbol, _DEFAULT_COLOR)


def ligand_offsets(geometry: MolecularGeometry, count: int, bond_length: float = BOND_LENGTH) -> list[Point]:
    """Offsets of the surrounding atoms from the central atom.

    Raises ``ValidationError`` if *count* exceeds what the geometry holds.
    """
    capacity = _CAPACITY[geometry]
    if count > capacity:
        raise ValidationError(
            f"Geometry '{geometry.value}' holds at most {capacity} surrounding atoms, got {count}."
        )
    L = bond_length
    offsets: list[Point] = []

    if geometry == MolecularGeometry.LINEAR:
        offsets = [Point(-L, 0), Point(L, 0)]
    elif geometry == MolecularGeometry.BENT:
        # Bond angle of water; both ligands hang below the central atom
        half = math.radians(104.5 / 2)
        offsets = [Point(-L * math.sin(half), L * math.cos(half)),
                   Point(L * math.sin(half), L * math.cos(half))]
    elif geometry == MolecularGeometry.TRIGONAL_PLANAR:
        for i in range(3):
            angle = math.radians(i * 120 - 90)
            offsets.append(Point(L * math.cos(angle), L * math.sin(angle)))
    elif geometry == MolecularGeometry.TRIGONAL_PYRAMIDAL:
        height = L * 0.8
        base = L * 0.6
        for i in range(3):
            angle = math.radians(i * 120 - 90)
            offsets.append(Point(base * math.cos(angle), height + base * math.sin(angle)))
    elif geometry == MolecularGeometry.TETRAHEDRAL:
        offsets = [Point(0, -L), Point(-L * 0.866, L * 0.5), Point(L * 0.866, L * 0.5), Point(0, L * 0.3)]
    elif geometry == MolecularGeometry.TRIGONAL_BIPYRAMIDAL:
        offsets = [Point(0, -L), Point(0, L)]
        for i in range(3):
            angle = math.radians(i * 120)
            offsets.append(Point(L * 0.7 * math.cos(angle), L * 0.7 * math.sin(angle)))
    elif geometry == MolecularGeometry.OCTAHEDRAL:
        offsets = [Point(0, -L), Point(0, L), Point(-L, 0), Point(L, 0),
                   Point(-L * 0.5, -L * 0.5), Point(L * 0.5, -L * 0.5)]

    return offsets[:count]


def molecule_layout(
    structure: MoleculeStructure,
    center_x: float = 500,
    center_y: float = 400,
    bond_length: float = BOND_LENGTH,
) -> MoleculeLayout:
    center = Point(center_x, center_y)
    result = MoleculeLayout()
    result.atoms.append(PlacedAtom(
        structure.central.id, structure.central.symbol, center, ATOM_RADIUS,
        cpk_color(structure.central.symbol),
    ))
    offsets = ligand_offsets(structure.geometry, len(structure.surrounding), bond_length)
    for atom, offset in zip(structure.surrounding, offsets):
        result.atoms.append(PlacedAtom(
            atom.id, atom.symbol, center + offset, ATOM_RADIUS, cpk_color(atom.symbol), atom.bond,
        ))
        result.bonds.append(Bond(structure.central.id, atom.id, atom.bond))
    return result


# formula: (central, [(symbol, count, bond)], geometry)
_COMMON_MOLECULES: dict[str, tuple[str, list[tuple[str, int, BondKind]], MolecularGeometry]] = {
    "H2O": ("O", [("H", 2, BondKind.SINGLE)], MolecularGeometry.BENT),
    "NH3": ("N", [("H", 3, BondKind.SINGLE)], MolecularGeometry.TRIGONAL_PYRAMIDAL),
    "CH4": ("C", [("H", 4, BondKind.SINGLE)], MolecularGeometry.TETRAHEDRAL),
    "CO2": ("C", [("O", 2, BondKind.DOUBLE)], MolecularGeometry.LINEAR),
    "H2S": ("S", [("H", 2, BondKind.SINGLE)], MolecularGeometry.BENT),
    "PH3": ("P", [("H", 3, BondKind.SINGLE)], MolecularGeometry.TRIGONAL_PYRAMIDAL),
    "SO2": ("S", [("O", 2, BondKind.DOUBLE)], MolecularGeometry.BENT),
    "BF3": ("B", [("F", 3, BondKind.SINGLE)], MolecularGeometry.TRIGONAL_PLANAR),
    "PCL5": ("P", [("Cl", 5, BondKind.SINGLE)], MolecularGeometry.TRIGONAL_BIPYRAMIDAL),
    "SF6": ("S", [("F", 6, BondKind.SINGLE)], MolecularGeometry.OCTAHEDRAL),
    "C2H4": ("C", [("H", 2, BondKind.SINGLE), ("C", 1, BondKind.DOUBLE)], MolecularGeometry.TRIGONAL_PLANAR),
    "C2H2": ("C", [("H", 1, BondKind.SINGLE), ("C", 1, BondKind.TRIPLE)], MolecularGeometry.LINEAR),
}


def parse_molecular_formula(formula: str) -> Optional[MoleculeStructure]:
    """Structure for a handful of common molecules (case-insensitive), else None."""
    entry = _COMMON_MOLECULES.get(formula.strip().upper())
    if entry is None:
        return None
    central, groups, geometry = entry
    surrounding = [
        AtomSpec(symbol, f"{symbol}-{i + 1}", bond)
        for symbol, count, bond in groups
        for i in range(count)
    ]
    return MoleculeStructure(AtomSpec(central, f"{central}-center"), surrounding, geometry)
