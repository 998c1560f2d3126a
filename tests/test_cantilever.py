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


def make_cantilever(beam: str = "create_linear_3d_beam", P: float = -10.0, L: float = 1.0):
    """
    Unit-length cantilever in a BEAM_1D model, fixed at node 1, tip load at node 2.

    Section 0.5 deep x 0.1 wide, E = 200000 -> EI = 208.33
    """
    model = FiniteElementModel(ModelType.BEAM_1D)
    node1 = model.node_factory.create(0.0)
    node2 = model.node_factory.create(L)

    material = GenericElasticMaterial(0, 200000, 0, 0)
    section = SolidRectangle(0.5, 0.1)
    getattr(model.element_factory, beam)(node1, node2, material, section)

    model.constrain_node(node1, DegreeOfFreedom.Z)
    model.constrain_node(node1, DegreeOfFreedom.YY)
    model.apply_force_to_node(model.force_factory.create_for_1d_beam(P, 0), node2)

    EI = material.youngs_modulus * section.izz
    return model, node1, node2, EI


@pytest.mark.parametrize("beam", ["create_linear_3d_beam", "create_linear_1d_beam"])
def test_cantilever_tip_load_deflection(beam):
    P = -10.0
    L = 1.0
    model, node1, node2, EI = make_cantilever(beam, P, L)

    results = LinearSolver(model).solve()
    tip = results.displacement(node2)

    uz_expected = P * L**3 / (3 * EI)
    # a downward load turns the tip "nose down": positive rotation about +Y
    ryy_expected = -P * L**2 / (2 * EI)

    assert np.isclose(tip.z, uz_expected, rtol=1e-6)
    assert np.isclose(tip.yy, ryy_expected, rtol=1e-6)
    assert np.isclose(tip.z, -0.016, atol=1e-3)
    assert np.isclose(tip.yy, 0.024, atol=1e-3)


def test_cantilever_reactions():
    model, node1, node2, _ = make_cantilever()
    results = LinearSolver(model).solve()

    reaction = results.reaction(node1)
    assert np.isclose(reaction.z, 10.0, atol=0.001)
    assert np.isclose(reaction.yy, -10.0, atol=0.001)

    # fixed end does not move
    assert results.displacement(node1).z == 0.0
    assert results.displacement(node1).yy == 0.0

    # no reaction where nothing is constrained
    assert results.reaction(node2).z == 0.0
    assert results.reaction(node2).yy == 0.0


def test_cantilever_only_analyses_beam_dofs():
    """A BEAM_1D model keeps Z and YY only, even though a 3D beam supports all six."""
    model, node1, node2, _ = make_cantilever()
    results = LinearSolver(model).solve()

    assert list(results.displacement(node2).keys()) == [DegreeOfFreedom.Z, DegreeOfFreedom.YY]
    assert len(results.displacements) == 4
