"""Tests for CIF parsing into renderable structures."""

import os
import tempfile
from pathlib import Path
from unittest import mock

import chex
import jax.numpy as jnp
import pytest
from absl.testing import parameterized

import crystalview  # noqa: F401
from crystalview.config import ATOM_CONFIG_ENV_VAR
from crystalview.errors import (
    AtomRowParseError,
    GeometryError,
    MetadataError,
    SourceReadError,
    TagParseError,
)
from crystalview.inout.cif import (
    extract_cell_params,
    is_atom_row,
    parse_atom_rows,
    parse_cif,
    parse_cif_float,
    parse_cif_text,
)
from crystalview.types import AtomStyle, CrystalStructure, LatticeParameters

NACL_CIF = """data_NaCl
_symmetry_space_group_name_H-M 'F m -3 m'
_cell_length_a 5.0
_cell_length_b 5.0
_cell_length_c 5.0
_cell_angle_alpha 90
_cell_angle_beta 90
_cell_angle_gamma 90
loop_
_atom_site_type_symbol
_atom_site_label
_atom_site_symmetry_multiplicity
_atom_site_fract_x
_atom_site_fract_y
_atom_site_fract_z
Na Na1 4 0.0 0.0 0.0
Cl Cl1 4 0.5 0.5 0.5
"""

NA_ONLY_CONFIG = {"Na": AtomStyle(radius=0.93, color="#AB5CF2")}


class TestParseCifFloat(chex.TestCase, parameterized.TestCase):
    """Numeric token parsing."""

    @parameterized.named_parameters(
        ("plain", "5.43", 5.43),
        ("integer", "90", 90.0),
        ("uncertainty", "5.4307(2)", 5.4307),
        ("exponent", "1e-3", 0.001),
        ("negative", "-0.25", -0.25),
    )
    def test_numbers(self, token: str, expected: float) -> None:
        assert parse_cif_float(token) == pytest.approx(expected)

    @parameterized.named_parameters(
        ("word", "abc"),
        ("unknown", "?"),
        ("nan", "nan"),
        ("inf", "inf"),
        ("empty", ""),
    )
    def test_non_numbers(self, token: str) -> None:
        assert parse_cif_float(token) is None


class TestExtractCellParams(chex.TestCase):
    """Lattice tag extraction."""

    def test_all_tags(self) -> None:
        params = extract_cell_params(NACL_CIF)

        assert params == LatticeParameters(5.0, 5.0, 5.0, 90.0, 90.0, 90.0)

    def test_absent_tags_default_to_zero(self) -> None:
        """Tags that never appear are 0.0."""
        params = extract_cell_params("data_x\n_cell_length_a 4.2\n")

        assert params.a == pytest.approx(4.2)
        assert params.b == 0.0
        assert params.gamma == 0.0

    def test_uncertainty_suffix(self) -> None:
        params = extract_cell_params("_cell_length_a 5.4307(2)\n")

        assert params.a == pytest.approx(5.4307)

    def test_later_tag_wins(self) -> None:
        params = extract_cell_params("_cell_length_a 4.0\n_cell_length_a 6.0\n")

        assert params.a == pytest.approx(6.0)

    def test_indented_tag_ignored(self) -> None:
        """Tags are matched at the start of the raw line."""
        params = extract_cell_params("  _cell_length_a 4.0\n")

        assert params.a == 0.0

    def test_missing_value_raises(self) -> None:
        """A tag with nothing after it never falls back to a default."""
        with pytest.raises(TagParseError) as info:
            extract_cell_params("data_x\n_cell_length_b 5.0\n_cell_length_a\n")

        assert info.value.tag == "_cell_length_a"
        assert info.value.line_number == 3
        assert "line 3" in str(info.value)

    def test_non_numeric_value_raises(self) -> None:
        with pytest.raises(TagParseError, match="not a number") as info:
            extract_cell_params("_cell_angle_gamma ninety\n")

        assert info.value.tag == "_cell_angle_gamma"
        assert info.value.line_number == 1


class TestAtomRows(chex.TestCase, parameterized.TestCase):
    """Atom row recognition and tokenization."""

    @parameterized.named_parameters(
        ("species_site", "Si Si1 1.0 0.0 0.0 0.0", True),
        ("multi_letter", "Na Na12 4 0 0 0", True),
        ("leading_space", "   O O2 1 0.1 0.2 0.3", True),
        ("label_first", "Na1 Na 4 0 0 0", False),
        ("tag", "_cell_length_a 5.0", False),
        ("loop", "loop_", False),
        ("blank", "", False),
        ("site_without_digit", "Si Si 1 0 0 0", False),
        ("numeric_species", "12 Si1 1 0 0 0", False),
    )
    def test_is_atom_row(self, line: str, expected: bool) -> None:
        assert is_atom_row(line) is expected

    def test_parse_rows(self) -> None:
        rows = parse_atom_rows(NACL_CIF)

        assert [r.label for r in rows] == ["Na", "Cl"]
        assert rows[1].position == (0.5, 0.5, 0.5)
        assert rows[0].line_number == 16

    def test_uncertainty_in_coordinates(self) -> None:
        rows = parse_atom_rows("Si Si1 1 0.1250(3) 0.5 0.75\n")

        assert rows[0].position == pytest.approx((0.125, 0.5, 0.75))

    def test_short_row_raises(self) -> None:
        """A recognised row without a z column names the missing field."""
        with pytest.raises(AtomRowParseError) as info:
            parse_atom_rows("data_x\nSi Si1 1 0.0 0.0\n")

        assert info.value.field == "z"
        assert info.value.line_number == 2
        assert info.value.token is None

    def test_bad_coordinate_raises(self) -> None:
        with pytest.raises(AtomRowParseError, match="not a number") as info:
            parse_atom_rows("Si Si1 1 0.0 abc 0.0\n")

        assert info.value.field == "y"
        assert info.value.token == "abc"


class TestParseCifText(chex.TestCase):
    """End-to-end CIF text to structure."""

    def test_nacl_structure(self) -> None:
        """Corner Na gains three images; body-centre Cl stays single."""
        structure = parse_cif_text(NACL_CIF, NA_ONLY_CONFIG)

        assert isinstance(structure, CrystalStructure)
        assert structure.n_atoms == 5
        assert structure.atoms.labels == ("Na", "Cl", "Na", "Na", "Na")
        chex.assert_trees_all_close(
            structure.atoms.positions,
            jnp.array(
                [
                    [-2.5, -2.5, -2.5],
                    [0.0, 0.0, 0.0],
                    [2.5, -2.5, -2.5],
                    [-2.5, 2.5, -2.5],
                    [-2.5, -2.5, 2.5],
                ]
            ),
            atol=1e-12,
        )

    def test_vertices_centred(self) -> None:
        structure = parse_cif_text(NACL_CIF, NA_ONLY_CONFIG)

        chex.assert_trees_all_close(
            jnp.mean(structure.lattice_vertices, axis=0), jnp.zeros(3), atol=1e-12
        )
        chex.assert_trees_all_close(
            jnp.abs(structure.lattice_vertices), jnp.full((8, 3), 2.5), atol=1e-12
        )

    def test_styles_and_default(self) -> None:
        """Known labels use the mapping, unknown labels the grey default."""
        structure = parse_cif_text(NACL_CIF, NA_ONLY_CONFIG)

        assert structure.atoms.colors[0] == "#AB5CF2"
        assert structure.atoms.colors[1] == "#505050"
        chex.assert_trees_all_close(
            structure.atoms.radii, jnp.array([0.93, 0.35, 0.93, 0.93, 0.93])
        )

    def test_combinatorial(self) -> None:
        structure = parse_cif_text(NACL_CIF, NA_ONLY_CONFIG, combinatorial=True)

        assert structure.n_atoms == 9

    def test_no_atoms(self) -> None:
        """A cell without atom rows still renders the cell."""
        text = NACL_CIF.split("loop_")[0]

        structure = parse_cif_text(text, NA_ONLY_CONFIG)

        assert structure.n_atoms == 0
        chex.assert_shape(structure.lattice_vertices, (8, 3))

    def test_hexagonal_cell(self) -> None:
        text = (
            "_cell_length_a 3.0\n_cell_length_b 3.0\n_cell_length_c 5.0\n"
            "_cell_angle_alpha 90\n_cell_angle_beta 90\n_cell_angle_gamma 120\n"
            "Zn Zn1 1 0.5 0.5 0.5\n"
        )

        structure = parse_cif_text(text, {})

        assert structure.n_atoms == 1
        chex.assert_trees_all_close(
            structure.atoms.positions[0], jnp.zeros(3), atol=1e-12
        )

    def test_missing_gamma_raises(self) -> None:
        """An absent gamma tag leaves gamma at 0, which has no basis."""
        text = NACL_CIF.replace("_cell_angle_gamma 90\n", "")

        with pytest.raises(GeometryError):
            parse_cif_text(text, NA_ONLY_CONFIG)


class TestParseCif(chex.TestCase):
    """File-level CIF parsing."""

    def test_parse_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            cif_file = Path(tmp_dir) / "nacl.cif"
            cif_file.write_text(NACL_CIF)

            structure = parse_cif(cif_file, NA_ONLY_CONFIG)

            assert structure.n_atoms == 5

    def test_default_mapping(self) -> None:
        """Without a mapping the bundled one is loaded."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            cif_file = Path(tmp_dir) / "nacl.cif"
            cif_file.write_text(NACL_CIF)

            with mock.patch.dict(os.environ, {ATOM_CONFIG_ENV_VAR: ""}):
                structure = parse_cif(str(cif_file))

            assert structure.atoms.colors[:2] == ("#AB5CF2", "#1FF01F")

    def test_file_not_found(self) -> None:
        with pytest.raises(SourceReadError, match="file not found") as info:
            parse_cif("/nonexistent/path.cif", NA_ONLY_CONFIG)

        assert info.value.path == Path("/nonexistent/path.cif")

    def test_bad_mapping_raised_before_read(self) -> None:
        """A broken default mapping fails before the CIF is opened."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            missing = Path(tmp_dir) / "absent.json"
            with mock.patch.dict(os.environ, {ATOM_CONFIG_ENV_VAR: str(missing)}):
                with pytest.raises(MetadataError):
                    parse_cif("/nonexistent/path.cif")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
