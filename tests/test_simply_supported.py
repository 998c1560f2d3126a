import numpy as np
import pytest

from stiffkit import (
    DegreeOfFreedom,
    FiniteElementModel,
    GenericElasticMaterial,
    LinearSolver,
    ModelType,
    SolidRectangle,
)


def make_simply_supported(M: float = 10.0, L: float = 1.0):
    """Beam on two vertical supports with an end moment about YY at node 1."""
    model = FiniteElementModel(ModelType.BEAM_1D)
    node1 = model.node_factory.create(0.0)
    node2 = model.node_factory.create(L)

    material = GenericElasticMaterial(0, 200000, 0, 0)
    section = SolidRectangle(0.5, 0.1)
    model.element_factory.create_linear_3d_beam(node1, node2, material, section)

    model.constrain_node(node1, DegreeOfFreedom.Z)
    model.constrain_node(node2, DegreeOfFreedom.Z)
    model.apply_force_to_node(model.force_factory.create_for_1d_beam(0, M), node1)

    EI = material.youngs_modulus * section.izz
    return model, node1, node2, EI


def test_simply_supported_end_moment_reactions():
    """
    Moment equilibrium about node 1:  M + (r2 × R2)·Y = 0
    With r2 = (L, 0, 0) and R2 along Z, (r2 × R2)·Y = -L·R2, so R2 = M/L.
    Vertical equilibrium then gives R1 = -M/L.
    """
    M = 10.0
    model, node1, node2, _ = make_simply_supported(M)

    results = LinearSolver(model).solve()

    assert np.isclose(results.reaction(node1).z, -10.0, atol=0.001)
    assert np.isclose(results.reaction(node2).z, 10.0, atol=0.001)

    # rotations are free: no moment reactions
    assert results.reaction(node1).yy == 0.0
    assert results.reaction(node2).yy == 0.0


def test_simply_supported_end_rotations():
    """θ1 = ML/(3EI) under the moment, θ2 = -ML/(6EI) at the far end."""
    M = 10.0
    L = 1.0
    model, node1, node2, EI = make_simply_supported(M, L)

    results = LinearSolver(model).solve()
    theta1 = results.displacement(node1).yy
    theta2 = results.displacement(node2).yy

    assert theta1 == pytest.approx(M * L / (3 * EI), rel=1e-6)
    assert theta2 == pytest.approx(-theta1 / 2, rel=1e-6)

    # supports hold their position
    assert results.displacement(node1).z == 0.0
    assert results.displacement(node2).z == 0.0
