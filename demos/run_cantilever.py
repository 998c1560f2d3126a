# File: demos/run_cantilever.py
"""
DEMO: CANTILEVER WITH A TIP LOAD (HAND CALCULATION CHECK)
=========================================================

A unit-length cantilever in a BEAM_1D model, fixed at node 1, with a
downward load P at node 2. The solver result is compared with the
Euler-Bernoulli closed form:

    tip deflection   δ = P·L³ / (3·E·I)
    tip rotation     θ = P·L² / (2·E·I)
"""

from stiffkit import (
    DegreeOfFreedom,
    FiniteElementModel,
    GenericElasticMaterial,
    LinearSolver,
    ModelType,
    SolidRectangle,
    configure_logging,
)


def main():
    configure_logging()

    L = 1.0
    P = -10.0
    material = GenericElasticMaterial(0, 200000, 0, 0)
    section = SolidRectangle(0.5, 0.1)
    EI = material.youngs_modulus * section.izz

    model = FiniteElementModel(ModelType.BEAM_1D)
    node1 = model.node_factory.create(0.0)
    node2 = model.node_factory.create(L)
    model.element_factory.create_linear_3d_beam(node1, node2, material, section)
    model.constrain_node(node1, DegreeOfFreedom.Z)
    model.constrain_node(node1, DegreeOfFreedom.YY)
    model.apply_force_to_node(model.force_factory.create_for_1d_beam(P, 0), node2)

    results = LinearSolver(model).solve()
    tip = results.displacement(node2)
    root = results.reaction(node1)

    print("=" * 60)
    print("DEMO: CANTILEVER TIP LOAD")
    print("=" * 60)
    print(f"EI = {EI:.3f}")
    print()
    print(f"{'':18}{'FEM':>12}{'closed form':>16}")
    print(f"{'tip uz':18}{tip.z:>12.5f}{P * L**3 / (3 * EI):>16.5f}")
    print(f"{'tip θyy':18}{tip.yy:>12.5f}{-P * L**2 / (2 * EI):>16.5f}")
    print(f"{'root reaction Z':18}{root.z:>12.4f}{-P:>16.4f}")
    print(f"{'root reaction YY':18}{root.yy:>12.4f}{P * L:>16.4f}")


if __name__ == "__main__":
    main()
