"""Tests for ucell.unitcell module.

Covers cell vector construction, the fractional/Cartesian transforms, the
eight lattice vertices and recentring on the cell centroid.
"""

import chex
import jax.numpy as jnp
import pytest
from absl.testing import parameterized
from jaxtyping import Array, Float

import crystalview  # noqa: F401
from crystalview.errors import GeometryError
from crystalview.types import LatticeParameters
from crystalview.ucell.unitcell import (
    build_cell_vectors,
    cartesian_to_fractional,
    cell_vectors_from_parameters,
    center_on_lattice,
    check_cell_geometry,
    compute_lengths_angles,
    fractional_to_cartesian,
    lattice_center,
    lattice_vertices,
)

CELLS = (
    ("cubic", 5.0, 5.0, 5.0, 90.0, 90.0, 90.0),
    ("tetragonal", 4.0, 4.0, 6.0, 90.0, 90.0, 90.0),
    ("hexagonal", 3.25, 3.25, 5.21, 90.0, 90.0, 120.0),
    ("monoclinic", 5.1, 6.2, 7.3, 90.0, 103.5, 90.0),
    ("triclinic", 5.0, 6.0, 7.0, 80.0, 95.0, 105.0),
    ("acute_triclinic", 4.2, 4.9, 5.6, 70.0, 75.0, 60.0),
)


class TestBuildCellVectors(chex.TestCase, parameterized.TestCase):
    """Test basis vector construction from lattice parameters."""

    def test_cubic_vectors(self) -> None:
        """Cubic cell gives a scaled identity."""
        vectors = build_cell_vectors(5.0, 5.0, 5.0, 90.0, 90.0, 90.0)

        chex.assert_trees_all_close(vectors, 5.0 * jnp.eye(3), atol=1e-12)

    def test_hexagonal_vectors(self) -> None:
        """gamma = 120 puts b at 120 degrees from a in the xy plane."""
        a = 3.0
        vectors = build_cell_vectors(a, a, 5.0, 90.0, 90.0, 120.0)
        expected = jnp.array(
            [[a, 0.0, 0.0], [-a / 2, a * jnp.sqrt(3.0) / 2, 0.0], [0.0, 0.0, 5.0]]
        )

        chex.assert_trees_all_close(vectors, expected, atol=1e-12)

    def test_first_vector_on_x_axis(self) -> None:
        """a lies along x and b lies in the xy plane."""
        vectors = build_cell_vectors(5.0, 6.0, 7.0, 80.0, 95.0, 105.0)

        assert vectors[0, 1] == 0.0
        assert vectors[0, 2] == 0.0
        assert vectors[1, 2] == 0.0
        assert vectors[2, 2] > 0.0

    @parameterized.named_parameters(*CELLS)
    def test_lengths_and_angles_recovered(
        self,
        a: float,
        b: float,
        c: float,
        alpha: float,
        beta: float,
        gamma: float,
    ) -> None:
        """|a|, |b|, |c| and the pairwise angles match the inputs."""
        vectors = build_cell_vectors(a, b, c, alpha, beta, gamma)
        lengths, angles = compute_lengths_angles(vectors)

        chex.assert_trees_all_close(lengths, jnp.array([a, b, c]), atol=1e-9)
        chex.assert_trees_all_close(
            angles, jnp.array([alpha, beta, gamma]), atol=1e-9
        )

    def test_from_parameters(self) -> None:
        """LatticeParameters wrapper matches the scalar form."""
        params = LatticeParameters(5.0, 6.0, 7.0, 80.0, 95.0, 105.0)

        chex.assert_trees_all_close(
            cell_vectors_from_parameters(params),
            build_cell_vectors(5.0, 6.0, 7.0, 80.0, 95.0, 105.0),
        )

    def test_accepts_array_scalars(self) -> None:
        """JAX scalar inputs are accepted."""
        vectors = build_cell_vectors(
            jnp.array(4.0),
            jnp.array(4.0),
            jnp.array(4.0),
            jnp.array(90.0),
            jnp.array(90.0),
            jnp.array(90.0),
        )

        chex.assert_trees_all_close(vectors, 4.0 * jnp.eye(3), atol=1e-12)


class TestCellGeometryGuard(chex.TestCase, parameterized.TestCase):
    """Degenerate parameters raise GeometryError instead of producing NaN."""

    @parameterized.named_parameters(
        ("gamma_zero", 0.0),
        ("gamma_straight", 180.0),
        ("gamma_full_turn", 360.0),
    )
    def test_vanishing_sin_gamma(self, gamma: float) -> None:
        with pytest.raises(GeometryError, match="sin\\(gamma\\)"):
            build_cell_vectors(5.0, 5.0, 5.0, 90.0, 90.0, gamma)

    def test_all_zero_parameters(self) -> None:
        """The all-default cell of a CIF without tags is rejected."""
        with pytest.raises(GeometryError):
            cell_vectors_from_parameters(
                LatticeParameters(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
            )

    def test_impossible_angle_triple(self) -> None:
        """alpha + beta < gamma admits no real third vector."""
        with pytest.raises(GeometryError, match="real unit cell"):
            check_cell_geometry(5.0, 5.0, 5.0, 30.0, 30.0, 120.0)

    def test_non_finite_parameter(self) -> None:
        with pytest.raises(GeometryError, match="finite"):
            check_cell_geometry(float("nan"), 5.0, 5.0, 90.0, 90.0, 90.0)

    def test_valid_cell_passes(self) -> None:
        check_cell_geometry(5.0, 6.0, 7.0, 80.0, 95.0, 105.0)


class TestCoordinateTransforms(chex.TestCase, parameterized.TestCase):
    """Test fractional <-> Cartesian conversion."""

    @chex.variants(with_jit=True, without_jit=True)
    def test_cubic_fractional_to_cartesian(self) -> None:
        """Fractional coordinates scale by the cubic edge."""
        vectors = build_cell_vectors(5.0, 5.0, 5.0, 90.0, 90.0, 90.0)
        frac: Float[Array, "3 3"] = jnp.array(
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.5, 0.5, 0.5]]
        )

        cart = self.variant(fractional_to_cartesian)(frac, vectors)

        chex.assert_trees_all_close(
            cart,
            jnp.array([[0.0, 0.0, 0.0], [5.0, 0.0, 0.0], [2.5, 2.5, 2.5]]),
            atol=1e-12,
        )

    def test_linear_combination_of_basis(self) -> None:
        """Cartesian = fx * a + fy * b + fz * c."""
        vectors = build_cell_vectors(5.0, 6.0, 7.0, 80.0, 95.0, 105.0)
        frac = jnp.array([[0.2, 0.3, 0.4]])

        cart = fractional_to_cartesian(frac, vectors)
        expected = 0.2 * vectors[0] + 0.3 * vectors[1] + 0.4 * vectors[2]

        chex.assert_trees_all_close(cart[0], expected, atol=1e-12)

    @parameterized.named_parameters(*CELLS)
    def test_round_trip(
        self,
        a: float,
        b: float,
        c: float,
        alpha: float,
        beta: float,
        gamma: float,
    ) -> None:
        """Fractional -> Cartesian -> fractional is the identity."""
        vectors = build_cell_vectors(a, b, c, alpha, beta, gamma)
        frac = jnp.array(
            [[0.0, 0.0, 0.0], [0.1, 0.7, 0.3], [1.0, 1.0, 1.0], [-0.2, 0.5, 1.3]]
        )

        back = cartesian_to_fractional(fractional_to_cartesian(frac, vectors), vectors)

        chex.assert_trees_all_close(back, frac, atol=1e-9)

    def test_empty_positions(self) -> None:
        """Zero atoms transform to zero atoms."""
        vectors = build_cell_vectors(5.0, 5.0, 5.0, 90.0, 90.0, 90.0)

        cart = fractional_to_cartesian(jnp.zeros((0, 3)), vectors)

        chex.assert_shape(cart, (0, 3))


class TestLatticeVertices(chex.TestCase, parameterized.TestCase):
    """Test the eight cell corners and recentring."""

    @chex.variants(with_jit=True, without_jit=True)
    def test_vertex_order(self) -> None:
        """Order is origin, a, a+b, b, c, a+c, a+b+c, b+c."""
        vectors = build_cell_vectors(5.0, 6.0, 7.0, 80.0, 95.0, 105.0)
        a_vec, b_vec, c_vec = vectors[0], vectors[1], vectors[2]

        vertices = self.variant(lattice_vertices)(vectors)
        expected = jnp.stack(
            [
                jnp.zeros(3),
                a_vec,
                a_vec + b_vec,
                b_vec,
                c_vec,
                a_vec + c_vec,
                a_vec + b_vec + c_vec,
                b_vec + c_vec,
            ]
        )

        chex.assert_shape(vertices, (8, 3))
        chex.assert_trees_all_close(vertices, expected, atol=1e-12)

    def test_cubic_vertices_form_cube(self) -> None:
        """Cubic a=5 gives every corner of [0, 5]^3."""
        vectors = build_cell_vectors(5.0, 5.0, 5.0, 90.0, 90.0, 90.0)

        vertices = lattice_vertices(vectors)
        corners = {tuple(round(float(v), 9) for v in row) for row in vertices}

        assert corners == {
            (x, y, z) for x in (0.0, 5.0) for y in (0.0, 5.0) for z in (0.0, 5.0)
        }

    def test_center_is_half_diagonal(self) -> None:
        """The vertex centroid is (a + b + c) / 2."""
        vectors = build_cell_vectors(5.0, 6.0, 7.0, 80.0, 95.0, 105.0)

        center = lattice_center(lattice_vertices(vectors))

        chex.assert_trees_all_close(center, jnp.sum(vectors, axis=0) / 2.0, atol=1e-12)

    @parameterized.named_parameters(*CELLS)
    def test_recentred_centroid_is_origin(
        self,
        a: float,
        b: float,
        c: float,
        alpha: float,
        beta: float,
        gamma: float,
    ) -> None:
        """After recentring, the vertex centroid is (0, 0, 0)."""
        vectors = build_cell_vectors(a, b, c, alpha, beta, gamma)
        positions = jnp.array([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]])

        vertices, moved = center_on_lattice(lattice_vertices(vectors), positions)

        chex.assert_trees_all_close(
            jnp.mean(vertices, axis=0), jnp.zeros(3), atol=1e-12
        )
        chex.assert_trees_all_close(
            moved - positions,
            jnp.broadcast_to(vertices[0], (2, 3)),
            atol=1e-12,
        )

    def test_cubic_recentred_symmetric(self) -> None:
        """A recentred cube spans [-2.5, 2.5] on every axis."""
        vectors = build_cell_vectors(5.0, 5.0, 5.0, 90.0, 90.0, 90.0)

        vertices, _ = center_on_lattice(lattice_vertices(vectors), jnp.zeros((0, 3)))

        chex.assert_trees_all_close(vertices[0], jnp.array([-2.5, -2.5, -2.5]))
        chex.assert_trees_all_close(vertices[6], jnp.array([2.5, 2.5, 2.5]))
        chex.assert_trees_all_close(-vertices[:4], vertices[jnp.array([6, 7, 4, 5])])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
