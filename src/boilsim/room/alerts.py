"""
Room Alerts
===========

Alert flags raised by the room loop and exposure tracking of toxic vapors.

COMPOSITION THRESHOLDS (mole fraction)
======================================

    O2       < 0.16  critical   < 0.195 warning   (oxygen deficiency)
    CO2      > 0.03  critical   > 0.01  warning
    NH3      > 0.0025 critical  > 0.001 warning
    C2H5OH   > 0.03  critical   > 0.01  warning
    toxic_generic > 0.001 critical

EXPOSURE LIMITS (ppm): TWA / STEL / IDLH
========================================

    NH3      25 / 50 / 300
    C3H6O    250 / 500 / 2500      (acetone)
    C2H5OH   1000 / 2000 / 3300
    CH4      10000 / 50000 / 150000

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .gas_exchange import mole_fraction_to_ppm


class AlertSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Alert:
    """One active alert flag."""

    code: str
    severity: AlertSeverity
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "severity": self.severity.value, "message": self.message}


@dataclass(frozen=True)
class CompositionThreshold:
    species: str
    label: str
    critical: float
    warning: Optional[float] = None
    below: bool = False  # True when low values are dangerous


COMPOSITION_THRESHOLDS = (
    CompositionThreshold("O2", "Oxygen", critical=0.16, warning=0.195, below=True),
    CompositionThreshold("CO2", "Carbon dioxide", critical=0.03, warning=0.01),
    CompositionThreshold("NH3", "Ammonia", critical=0.0025, warning=0.001),
    CompositionThreshold("C2H5OH", "Ethanol vapor", critical=0.03, warning=0.01),
    CompositionThreshold("toxic_generic", "Toxic gas", critical=0.001),
)


@dataclass(frozen=True)
class ExposureLimit:
    name: str
    twa_ppm: float
    stel_ppm: float
    idlh_ppm: float


TOXIC_THRESHOLDS: Dict[str, ExposureLimit] = {
    "NH3": ExposureLimit("Ammonia", 25.0, 50.0, 300.0),
    "C3H6O": ExposureLimit("Acetone", 250.0, 500.0, 2500.0),
    "C2H5OH": ExposureLimit("Ethanol", 1000.0, 2000.0, 3300.0),
    "CH4": ExposureLimit("Methane", 10000.0, 50000.0, 150000.0),
}


def check_composition_alerts(composition: Mapping[str, float]) -> List[Alert]:
    """Alerts for every species past its warning or critical threshold."""
    alerts = []
    for threshold in COMPOSITION_THRESHOLDS:
        if threshold.species not in composition:
            continue
        fraction = composition[threshold.species]

        def past(limit: float) -> bool:
            return fraction < limit if threshold.below else fraction > limit

        if past(threshold.critical):
            severity = AlertSeverity.CRITICAL
        elif threshold.warning is not None and past(threshold.warning):
            severity = AlertSeverity.WARNING
        else:
            continue

        direction = "low" if threshold.below else "high"
        alerts.append(
            Alert(
                code=f"{threshold.species.lower()}_{direction}",
                severity=severity,
                message=f"{threshold.label} at {fraction * 100:.2f}%",
            )
        )
    return alerts


@dataclass(frozen=True)
class ExposureEvent:
    """A continuous period above the TWA limit of one species."""

    species: str
    name: str
    started_at: float
    duration_s: float
    peak_ppm: float
    active: bool = True

    @property
    def severity(self) -> AlertSeverity:
        limit = TOXIC_THRESHOLDS[self.species]
        if self.peak_ppm > limit.idlh_ppm:
            return AlertSeverity.CRITICAL
        if self.peak_ppm > limit.stel_ppm:
            return AlertSeverity.WARNING
        return AlertSeverity.INFO


class ExposureTracker:
    """Opens, extends and closes exposure events as concentrations change."""

    def __init__(self):
        self.events: List[ExposureEvent] = []
        self._open: Dict[str, int] = {}

    def update(self, composition: Mapping[str, float], time: float, dt: float) -> List[Alert]:
        """
        Track exposures for one interval.

        Returns:
            Alerts for the currently open events
        """
        alerts = []
        for species, limit in TOXIC_THRESHOLDS.items():
            ppm = mole_fraction_to_ppm(composition.get(species, 0.0))
            index = self._open.get(species)

            if ppm <= limit.twa_ppm:
                if index is not None:
                    self.events[index] = replace(self.events[index], active=False)
                    del self._open[species]
                continue

            if index is None:
                self._open[species] = len(self.events)
                self.events.append(
                    ExposureEvent(species, limit.name, time, dt, ppm)
                )
            else:
                event = self.events[index]
                self.events[index] = replace(
                    event,
                    duration_s=event.duration_s + dt,
                    peak_ppm=max(event.peak_ppm, ppm),
                )

            event = self.events[self._open[species]]
            alerts.append(
                Alert(
                    code=f"exposure_{species.lower()}",
                    severity=event.severity,
                    message=f"{limit.name} {ppm:.0f} ppm above TWA {limit.twa_ppm:.0f} ppm",
                )
            )
        return alerts
