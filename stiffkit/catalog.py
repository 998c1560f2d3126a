"""
CATALOG: MATERIAL AND SECTION PROPERTIES
=========================================

PURPOSE:
--------
Plain data records the stiffness builders read from:

- **Material**: GenericElasticMaterial (density, E, Poisson's ratio, G)
- **Section**: SolidRectangle (computed from its dimensions) or
  GenericCrossSection (properties given directly)

Plus a few standard materials so demos and tests don't hardcode E=210e9
everywhere.

SECTION AXES:
-------------
Section properties are expressed in the element's LOCAL frame:

    local x   along the member
    local y   "depth" direction  -> bending about z uses Izz
    local z   "width" direction  -> bending about y uses Iyy

For a member lying along the global X axis, local y is global Z (up), so a
SolidRectangle(depth=0.5, width=0.1) is a 0.5 deep, 0.1 wide beam bending
about its strong axis under vertical load.

The records only check their own values (no negatives, no NaN). Whether a
property must be strictly positive depends on the element that uses it and is
checked by the stiffness builders.
"""

from dataclasses import dataclass, replace

from .errors import InvalidPropertyError
from .kernel.validate import require_non_negative, require_positive


@dataclass(frozen=True)
class GenericElasticMaterial:
    """
    Linear elastic, isotropic material.

    Parameters:
    -----------
    density : float
        Mass density (kg/m³). Not used by static stiffness; kept for self-weight.
    youngs_modulus : float
        E (Pa)
    poissons_ratio : float
        ν, in [0, 0.5)
    shear_modulus : float
        G (Pa). A value of 0 is legal and gives zero torsional stiffness.

    Example:
    --------
    >>> steel = GenericElasticMaterial(7850, 210e9, 0.3, 81e9)
    """
    density: float
    youngs_modulus: float
    poissons_ratio: float
    shear_modulus: float

    def __post_init__(self):
        require_non_negative(self.density, "density")
        require_non_negative(self.youngs_modulus, "youngs_modulus")
        require_non_negative(self.shear_modulus, "shear_modulus")
        # auxetic materials have a negative ratio; NaN fails the comparison
        if not -1.0 < float(self.poissons_ratio) < 0.5:
            raise InvalidPropertyError(
                f"poissons_ratio must lie in (-1, 0.5), got {self.poissons_ratio}."
            )

    @classmethod
    def isotropic(cls, density: float, youngs_modulus: float, poissons_ratio: float) -> "GenericElasticMaterial":
        """Derive G = E / (2(1 + ν))."""
        material = cls(density, youngs_modulus, poissons_ratio, 0.0)
        G = material.youngs_modulus / (2.0 * (1.0 + material.poissons_ratio))
        return replace(material, shear_modulus=G)


@dataclass(frozen=True)
class GenericCrossSection:
    """Cross-section with properties given directly (area, Iyy, Izz, J)."""
    area: float
    iyy: float
    izz: float
    j: float = 0.0

    def __post_init__(self):
        require_non_negative(self.area, "area")
        require_non_negative(self.iyy, "iyy")
        require_non_negative(self.izz, "izz")
        require_non_negative(self.j, "j")


@dataclass(frozen=True)
class SolidRectangle:
    """
    Solid rectangular section.

    Parameters:
    -----------
    depth : float
        Dimension along local y (m)
    width : float
        Dimension along local z (m)
    """
    depth: float
    width: float

    def __post_init__(self):
        require_positive(self.depth, "depth")
        require_positive(self.width, "width")

    @property
    def area(self) -> float:
        return self.depth * self.width

    @property
    def izz(self) -> float:
        # bending in the local x-y plane, depth is the lever arm
        return self.width * self.depth ** 3 / 12.0

    @property
    def iyy(self) -> float:
        return self.depth * self.width ** 3 / 12.0

    @property
    def j(self) -> float:
        """
        Saint-Venant torsion constant, Roark's approximation:

            J = a·b³·(1/3 − 0.21·(b/a)·(1 − b⁴/(12·a⁴)))    with a ≥ b
        """
        a = max(self.depth, self.width)
        b = min(self.depth, self.width)
        return a * b ** 3 * (1.0 / 3.0 - 0.21 * (b / a) * (1.0 - b ** 4 / (12.0 * a ** 4)))


# Standard materials (SI units: kg/m³, Pa)
STEEL = GenericElasticMaterial(density=7850.0, youngs_modulus=210e9, poissons_ratio=0.3, shear_modulus=81e9)
ALUMINIUM = GenericElasticMaterial(density=2700.0, youngs_modulus=70e9, poissons_ratio=0.33, shear_modulus=26e9)
TIMBER = GenericElasticMaterial(density=500.0, youngs_modulus=11e9, poissons_ratio=0.3, shear_modulus=0.69e9)
