import pandas as pd
import pytest

from stiffkit import (
    DegreeOfFreedom,
    FiniteElementModel,
    LinearSolver,
    ModelType,
    Node,
    UnknownNodeError,
    UnsupportedDegreeOfFreedomError,
)
from stiffkit.catalog import STEEL, GenericCrossSection

D = DegreeOfFreedom


@pytest.fixture
def truss_results():
    """A single bar in a 2D truss model, pinned at one end, roller at the other."""
    model = FiniteElementModel(ModelType.TRUSS_2D)
    a = model.node_factory.create_for_truss(0.0, 0.0)
    b = model.node_factory.create_for_truss(4.0, 0.0)
    model.element_factory.create_linear_truss(a, b, STEEL, GenericCrossSection(0.01, 0.0, 0.0))
    model.constrain_node(a, D.X)
    model.constrain_node(a, D.Z)
    model.constrain_node(b, D.Z)
    model.apply_force_to_node(model.force_factory.create_for_truss(1000.0, -50.0), b)
    return LinearSolver(model).solve(), a, b


def test_per_node_vectors(truss_results):
    results, a, b = truss_results

    d = results.displacement(b)
    r = results.reaction(b)

    assert list(d.keys()) == [D.X, D.Z]
    assert d.x == pytest.approx(1000.0 * 4.0 / (STEEL.youngs_modulus * 0.01))
    assert d[D.Z] == 0.0
    assert r.z == pytest.approx(50.0)
    assert r.x == 0.0
    assert results.reaction(a).x == pytest.approx(-1000.0)


def test_dof_outside_analysis(truss_results):
    results, a, b = truss_results

    with pytest.raises(UnsupportedDegreeOfFreedomError):
        results.displacement(b).y
    with pytest.raises(UnsupportedDegreeOfFreedomError):
        results.reaction(a)[D.YY]


def test_unknown_node(truss_results):
    results, a, b = truss_results
    impostor = Node(a.id, a.x, a.y, a.z)

    with pytest.raises(UnknownNodeError, match="not part of the analysed model"):
        results.displacement(impostor)
    with pytest.raises(KeyError):
        results.reaction(Node(42))


def test_is_constrained(truss_results):
    results, a, b = truss_results

    assert results.is_constrained(a, D.X)
    assert results.is_constrained(b, D.Z)
    assert not results.is_constrained(b, D.X)


def test_to_dataframe(truss_results):
    results, a, b = truss_results

    df = results.to_dataframe()

    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["node", "x", "y", "z", "dof", "constrained", "displacement", "reaction"]
    assert len(df) == 4
    row = df[(df["node"] == b.id) & (df["dof"] == "X")].iloc[0]
    assert not row["constrained"]
    assert row["displacement"] > 0.0
    assert df.loc[df["constrained"], "reaction"].sum() == pytest.approx(-950.0)
