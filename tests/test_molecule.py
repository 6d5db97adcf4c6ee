"""Tests for the molecule layout."""

import math

import pytest

from diagram_layout.models import Point
from diagram_layout.molecule import (
    AtomSpec,
    BondKind,
    MolecularGeometry,
    MoleculeStructure,
    cpk_color,
    ligand_offsets,
    molecule_layout,
    parse_molecular_formula,
)
from diagram_layout.validation import ValidationError


class TestLigandOffsets:
    def test_linear(self) -> None:
        assert ligand_offsets(MolecularGeometry.LINEAR, 2) == [Point(-100, 0), Point(100, 0)]

    def test_bent_water_angle(self) -> None:
        left, right = ligand_offsets(MolecularGeometry.BENT, 2)
        angle = math.degrees(math.atan2(left.y, left.x) - math.atan2(right.y, right.x))
        assert angle == pytest.approx(104.5)

    def test_trigonal_planar_first_on_top(self) -> None:
        first = ligand_offsets(MolecularGeometry.TRIGONAL_PLANAR, 3)[0]
        assert (first.x, first.y) == pytest.approx((0, -100))

    def test_bond_length_applies(self) -> None:
        for offset in ligand_offsets(MolecularGeometry.OCTAHEDRAL, 4, bond_length=50):
            assert math.hypot(offset.x, offset.y) == pytest.approx(50)

    def test_fewer_ligands_than_positions(self) -> None:
        assert len(ligand_offsets(MolecularGeometry.TETRAHEDRAL, 2)) == 2

    def test_too_many_ligands(self) -> None:
        with pytest.raises(ValidationError, match="at most 2"):
            ligand_offsets(MolecularGeometry.LINEAR, 3)


class TestMoleculeLayout:
    def test_water(self) -> None:
        structure = parse_molecular_formula("h2o")
        mol = molecule_layout(structure)
        central = mol.atoms[0]
        assert central.symbol == "O"
        assert central.center == Point(500, 400)
        assert central.color == cpk_color("O")
        hydrogens = mol.atoms[1:]
        assert [a.symbol for a in hydrogens] == ["H", "H"]
        for atom in hydrogens:
            assert central.center.distance_to(atom.center) == pytest.approx(100)
        assert [(b.source, b.target) for b in mol.bonds] == [("O-center", "H-1"), ("O-center", "H-2")]

    def test_custom_center(self) -> None:
        structure = MoleculeStructure(
            AtomSpec("C", "c"), [AtomSpec("O", "o1", BondKind.DOUBLE)], MolecularGeometry.LINEAR,
        )
        mol = molecule_layout(structure, center_x=0, center_y=0)
        assert mol.atoms[1].center == Point(-100, 0)
        assert mol.bonds[0].kind == BondKind.DOUBLE


class TestFormulas:
    def test_known_formula(self) -> None:
        structure = parse_molecular_formula("PCl5")
        assert structure.geometry == MolecularGeometry.TRIGONAL_BIPYRAMIDAL
        assert len(structure.surrounding) == 5

    def test_mixed_bonds(self) -> None:
        structure = parse_molecular_formula("C2H2")
        assert [a.bond for a in structure.surrounding] == [BondKind.SINGLE, BondKind.TRIPLE]

    def test_unknown_formula(self) -> None:
        assert parse_molecular_formula("XeF4") is None

    def test_unknown_element_color(self) -> None:
        assert cpk_color("Xe") == "#868e96"
