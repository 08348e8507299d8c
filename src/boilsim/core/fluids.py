"""
Fluid Property Model
====================

Immutable thermophysical properties of the fluids that can be boiled,
parsed from loosely-typed YAML/JSON documents into validated dataclasses.

PROPERTY UNITS
==============

- specific_heat: J/(g·°C)       (water: 4.186)
- heat_of_vaporization: kJ/kg   (water: 2257)
- boiling_point: °C at 101325 Pa, volatile solvent only
- antoine: log10(P[mmHg]) = A - B / (C + T[°C]), verified on [t_min, t_max]
- molar_mass: kg/mol            (water: 0.018015)
- cooling_coefficient: 1/s      (Newton's law, pot in still air ≈ 0.0015)
- nonvolatile_mass_fraction: [0, 1), solids left behind as residue

DOCUMENT FORMAT
===============

Numbers may be given bare or as {value, unit} mappings:

    id: water
    name: Water
    formula: H₂O
    molar_mass: 0.018015
    boiling_point: {value: 100.0, unit: °C}
    specific_heat: {value: 4.186, unit: J/(g·°C)}
    heat_of_vaporization: {value: 2257, unit: kJ/kg}
    antoine: {A: 8.07131, B: 1730.63, C: 233.426, t_min: 1, t_max: 100}

Solutions add `components` (name, mass_fraction, volatile) or an explicit
`nonvolatile_mass_fraction`, and optionally `vant_hoff_factor` + `molality`
for boiling-point elevation.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import json
import logging
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Default Newton cooling constant for a pot in still air [1/s]
DEFAULT_COOLING_COEFFICIENT = 0.0015

_SUBSCRIPTS = str.maketrans("₀₁₂₃₄₅₆₇₈₉", "0123456789")


@dataclass(frozen=True)
class AntoineCoefficients:
    """
    Antoine vapor-pressure coefficients (mmHg, °C).

    Attributes:
        A, B, C: Empirical coefficients
        t_min: Lower end of the verified temperature range [°C]
        t_max: Upper end of the verified temperature range [°C]
    """

    A: float
    B: float
    C: float
    t_min: float
    t_max: float

    def validate(self) -> None:
        """Validate coefficient finiteness and range ordering."""
        for name in ("A", "B", "C", "t_min", "t_max"):
            value = getattr(self, name)
            if not np.isfinite(value):
                raise ConfigurationError(f"Antoine {name} must be finite: {value}")
        if self.B <= 0:
            raise ConfigurationError(f"Antoine B must be positive: B={self.B}")
        if self.t_min >= self.t_max:
            raise ConfigurationError(
                f"Antoine range is empty: [{self.t_min}, {self.t_max}]"
            )
        if self.C + self.t_min <= 0:
            raise ConfigurationError(
                f"Antoine C + t_min must be positive: C={self.C}, t_min={self.t_min}"
            )


@dataclass(frozen=True)
class FluidProperties:
    """
    Thermophysical properties of one fluid (shared, read-only).

    Attributes:
        id: Catalog identifier
        name: Display name
        formula: Chemical formula, also the vapor species key in the room
        specific_heat: Liquid specific heat [J/(g·°C)]
        heat_of_vaporization: Latent heat [kJ/kg]
        antoine: Vapor-pressure correlation
        boiling_point: Normal boiling point of the volatile solvent [°C]
        molar_mass: Molar mass of the volatile solvent [kg/mol]
        cooling_coefficient: Newton cooling constant [1/s]
        nonvolatile_mass_fraction: Fraction of the liquid that never boils off
        vant_hoff_factor: Solute particles per formula unit
        molality: Solute molality [mol/kg] (0 for a pure fluid)
    """

    id: str
    name: str
    formula: str
    specific_heat: float
    heat_of_vaporization: float
    antoine: AntoineCoefficients
    boiling_point: float
    molar_mass: float
    cooling_coefficient: float = DEFAULT_COOLING_COEFFICIENT
    nonvolatile_mass_fraction: float = 0.0
    vant_hoff_factor: float = 1.0
    molality: float = 0.0

    def validate(self) -> None:
        """Validate physical consistency of the properties."""
        positive = {
            "specific_heat": self.specific_heat,
            "heat_of_vaporization": self.heat_of_vaporization,
            "molar_mass": self.molar_mass,
            "cooling_coefficient": self.cooling_coefficient,
            "vant_hoff_factor": self.vant_hoff_factor,
        }
        for name, value in positive.items():
            if not np.isfinite(value) or value <= 0:
                raise ConfigurationError(
                    f"{self.id}: {name} must be positive and finite: {value}"
                )

        if not np.isfinite(self.boiling_point):
            raise ConfigurationError(f"{self.id}: boiling_point must be finite")

        if not (0.0 <= self.nonvolatile_mass_fraction < 1.0):
            raise ConfigurationError(
                f"{self.id}: nonvolatile_mass_fraction must be in [0, 1): "
                f"{self.nonvolatile_mass_fraction}"
            )

        if not np.isfinite(self.molality) or self.molality < 0:
            raise ConfigurationError(f"{self.id}: molality must be >= 0")

        self.antoine.validate()
        if not (self.antoine.t_min <= self.boiling_point <= self.antoine.t_max):
            raise ConfigurationError(
                f"{self.id}: Antoine range [{self.antoine.t_min}, "
                f"{self.antoine.t_max}] does not bracket boiling point "
                f"{self.boiling_point}"
            )

    @property
    def vapor_species(self) -> str:
        """Formula with subscript digits flattened (H₂O -> H2O)."""
        return self.formula.translate(_SUBSCRIPTS)

    @property
    def molar_heat_of_vaporization(self) -> float:
        """Latent heat per mole [J/mol]."""
        return self.heat_of_vaporization * 1000.0 * self.molar_mass

    @property
    def is_solution(self) -> bool:
        return self.molality > 0

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "FluidProperties":
        """
        Build validated properties from a parsed document.

        Args:
            doc: Mapping loaded from YAML or JSON

        Returns:
            Validated FluidProperties

        Raises:
            ConfigurationError: Missing, non-numeric or non-physical field
        """
        if not isinstance(doc, dict):
            raise ConfigurationError(
                f"Fluid document must be a mapping, got {type(doc).__name__}"
            )

        fluid_id = str(doc.get("id") or doc.get("name") or "").strip()
        if not fluid_id:
            raise ConfigurationError("Fluid document has no id")

        antoine_doc = doc.get("antoine")
        if not isinstance(antoine_doc, dict):
            raise ConfigurationError(f"{fluid_id}: missing antoine coefficients")

        antoine = AntoineCoefficients(
            A=read_number(antoine_doc, "A", fluid_id),
            B=read_number(antoine_doc, "B", fluid_id),
            C=read_number(antoine_doc, "C", fluid_id),
            t_min=read_number(antoine_doc, "t_min", fluid_id),
            t_max=read_number(antoine_doc, "t_max", fluid_id),
        )

        nonvolatile = doc.get("nonvolatile_mass_fraction")
        if nonvolatile is None:
            nonvolatile = _nonvolatile_from_components(doc.get("components"), fluid_id)
        else:
            nonvolatile = read_number(doc, "nonvolatile_mass_fraction", fluid_id)

        fluid = cls(
            id=fluid_id,
            name=str(doc.get("name", fluid_id)),
            formula=str(doc.get("formula", fluid_id)),
            specific_heat=read_number(doc, "specific_heat", fluid_id),
            heat_of_vaporization=read_number(doc, "heat_of_vaporization", fluid_id),
            antoine=antoine,
            boiling_point=read_number(doc, "boiling_point", fluid_id),
            molar_mass=read_number(doc, "molar_mass", fluid_id),
            cooling_coefficient=read_number(
                doc, "cooling_coefficient", fluid_id, DEFAULT_COOLING_COEFFICIENT
            ),
            nonvolatile_mass_fraction=nonvolatile,
            vant_hoff_factor=read_number(doc, "vant_hoff_factor", fluid_id, 1.0),
            molality=read_number(doc, "molality", fluid_id, 0.0),
        )
        fluid.validate()
        logger.debug(f"Loaded fluid '{fluid.id}' (bp {fluid.boiling_point}°C)")
        return fluid


def read_number(
    doc: Dict[str, Any], key: str, owner: str, default: Optional[float] = None
) -> float:
    """Extract a finite float from a bare value or a {value, unit} mapping."""
    raw = doc.get(key)
    if isinstance(raw, dict):
        raw = raw.get("value")

    if raw is None:
        if default is None:
            raise ConfigurationError(f"{owner}: missing required field '{key}'")
        return float(default)

    if isinstance(raw, bool):
        raise ConfigurationError(f"{owner}: '{key}' must be numeric, got bool")

    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{owner}: '{key}' is not numeric: {raw!r}")

    if not np.isfinite(value):
        raise ConfigurationError(f"{owner}: '{key}' must be finite: {value}")
    return value


def _nonvolatile_from_components(components: Any, owner: str) -> float:
    """Sum the mass fractions of components flagged non-volatile."""
    if not components:
        return 0.0
    if not isinstance(components, list):
        raise ConfigurationError(f"{owner}: components must be a list")

    total = 0.0
    for component in components:
        if not isinstance(component, dict):
            raise ConfigurationError(f"{owner}: malformed component {component!r}")
        if component.get("volatile", True):
            continue
        total += read_number(component, "mass_fraction", owner)
    return total


def read_document(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a YAML or JSON document from disk.

    Raises:
        ConfigurationError: File missing or unparseable
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}")

    try:
        if path.suffix.lower() == ".json":
            doc = json.loads(text)
        else:
            doc = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse {path}: {e}")

    if doc is None:
        raise ConfigurationError(f"{path} is empty")
    return doc


def load_fluid(path: Union[str, Path]) -> FluidProperties:
    """Load and validate a fluid document from disk."""
    return FluidProperties.from_document(read_document(path))


def builtin_fluid(name: str) -> FluidProperties:
    """
    Load one of the fluids shipped with the package.

    Args:
        name: 'water' or 'ethanol'
    """
    resource = files("boilsim") / "data" / "fluids" / f"{name}.yaml"
    if not resource.is_file():
        raise ConfigurationError(
            f"Unknown built-in fluid '{name}' (available: {', '.join(builtin_fluid_names())})"
        )
    return FluidProperties.from_document(yaml.safe_load(resource.read_text(encoding="utf-8")))


def builtin_fluid_names():
    directory = files("boilsim") / "data" / "fluids"
    return sorted(
        entry.name[: -len(".yaml")]
        for entry in directory.iterdir()
        if entry.name.endswith(".yaml")
    )


WATER = builtin_fluid("water")
