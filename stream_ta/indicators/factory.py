"""
Factory and YAML loader for streaming indicators.

Provides create_indicator() to instantiate any indicator from a type string
and parameter dict, plus IndicatorSpec / load_indicator_specs() for
declaring indicator sets in YAML:

    indicators:
      - type: sma
        name: sma_fast
        params: {time_period: 10}
      - type: bbands
        params: {time_period: 20, source: high}
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.bar import get_projection
from ..core.errors import StreamTAError, UnsupportedIndicatorError
from .base import Indicator, ResultSeries, ResultSink
from .directional import ADX, ADXR, ATR, DX, MinusDI, MinusDM, PlusDI, PlusDM, TrueRange
from .ema_composable import DEMA, MACD, TEMA
from .extrema import HHV, HHVBars, LLV, LLVBars
from .moving_average import EMA, SMA, WMA
from .oscillators import RSI, StochRSI
from .stateful import SAR
from .variance import BollingerBands, StdDev, Variance


# =============================================================================
# Factory for creating indicators from a type string
# =============================================================================


_VALID_PARAMS: dict[str, frozenset[str]] = {
    # Scalar indicators accept "source" (open/high/low/close/volume)
    "sma": frozenset({"time_period", "source"}),
    "ema": frozenset({"time_period", "source"}),
    "wma": frozenset({"time_period", "source"}),
    "dema": frozenset({"time_period", "source"}),
    "tema": frozenset({"time_period", "source"}),
    "macd": frozenset({"fast_period", "slow_period", "signal_period", "source"}),
    "variance": frozenset({"time_period", "source"}),
    "stddev": frozenset({"time_period", "source"}),
    "bbands": frozenset({"time_period", "deviations_up", "deviations_down", "source"}),
    "hhv": frozenset({"time_period", "source"}),
    "llv": frozenset({"time_period", "source"}),
    "hhvbars": frozenset({"time_period", "source"}),
    "llvbars": frozenset({"time_period", "source"}),
    "rsi": frozenset({"time_period", "source"}),
    "stochrsi": frozenset({"time_period", "fast_k_period", "fast_d_period", "source"}),
    # Bar indicators
    "truerange": frozenset(),
    "atr": frozenset({"time_period"}),
    "plusdm": frozenset({"time_period"}),
    "minusdm": frozenset({"time_period"}),
    "plusdi": frozenset({"time_period"}),
    "minusdi": frozenset({"time_period"}),
    "dx": frozenset({"time_period"}),
    "adx": frozenset({"time_period"}),
    "adxr": frozenset({"time_period"}),
    "sar": frozenset({"acceleration", "acceleration_max"}),
}


def _validate_params(indicator_type: str, params: dict[str, Any]) -> None:
    """Raise ValueError if params contains unknown keys for this indicator."""
    valid = _VALID_PARAMS[indicator_type]
    unknown = set(params.keys()) - valid
    if unknown:
        raise ValueError(
            f"Unknown params for '{indicator_type}': {sorted(unknown)}. "
            f"Valid: {sorted(valid)}"
        )


def _source(p: dict[str, Any]) -> dict[str, Any]:
    """Keyword arguments selecting the bar projection, if one was given."""
    if "source" not in p:
        return {}
    return {"select": get_projection(p["source"])}


# Each entry maps an indicator type to a callable(params, sink) -> Indicator.
_FACTORY: dict[str, Callable[[dict[str, Any], ResultSink], Indicator]] = {
    # Moving averages
    "sma": lambda p, s: SMA(p.get("time_period", 20), sink=s, **_source(p)),
    "ema": lambda p, s: EMA(p.get("time_period", 20), sink=s, **_source(p)),
    "wma": lambda p, s: WMA(p.get("time_period", 20), sink=s, **_source(p)),
    # EMA-composable
    "dema": lambda p, s: DEMA(p.get("time_period", 20), sink=s, **_source(p)),
    "tema": lambda p, s: TEMA(p.get("time_period", 20), sink=s, **_source(p)),
    "macd": lambda p, s: MACD(
        p.get("fast_period", 12), p.get("slow_period", 26), p.get("signal_period", 9),
        sink=s, **_source(p),
    ),
    # Variance-based
    "variance": lambda p, s: Variance(p.get("time_period", 10), sink=s, **_source(p)),
    "stddev": lambda p, s: StdDev(p.get("time_period", 10), sink=s, **_source(p)),
    "bbands": lambda p, s: BollingerBands(
        p.get("time_period", 5), p.get("deviations_up", 2.0), p.get("deviations_down", 2.0),
        sink=s, **_source(p),
    ),
    # Window extremes
    "hhv": lambda p, s: HHV(p.get("time_period", 14), sink=s, **_source(p)),
    "llv": lambda p, s: LLV(p.get("time_period", 14), sink=s, **_source(p)),
    "hhvbars": lambda p, s: HHVBars(p.get("time_period", 14), sink=s, **_source(p)),
    "llvbars": lambda p, s: LLVBars(p.get("time_period", 14), sink=s, **_source(p)),
    # Oscillators
    "rsi": lambda p, s: RSI(p.get("time_period", 14), sink=s, **_source(p)),
    "stochrsi": lambda p, s: StochRSI(
        p.get("time_period", 14), p.get("fast_k_period", 5), p.get("fast_d_period", 3),
        sink=s, **_source(p),
    ),
    # Directional movement
    "truerange": lambda _, s: TrueRange(sink=s),
    "atr": lambda p, s: ATR(p.get("time_period", 14), sink=s),
    "plusdm": lambda p, s: PlusDM(p.get("time_period", 14), sink=s),
    "minusdm": lambda p, s: MinusDM(p.get("time_period", 14), sink=s),
    "plusdi": lambda p, s: PlusDI(p.get("time_period", 14), sink=s),
    "minusdi": lambda p, s: MinusDI(p.get("time_period", 14), sink=s),
    "dx": lambda p, s: DX(p.get("time_period", 14), sink=s),
    "adx": lambda p, s: ADX(p.get("time_period", 14), sink=s),
    "adxr": lambda p, s: ADXR(p.get("time_period", 14), sink=s),
    # Stateful
    "sar": lambda p, s: SAR(p.get("acceleration", 0.02), p.get("acceleration_max", 0.2), sink=s),
}


def create_indicator(
    indicator_type: str,
    params: dict[str, Any] | None = None,
    sink: ResultSink | None = None,
) -> Indicator:
    """
    Create an indicator from a type string and parameters.

    Args:
        indicator_type: Indicator type (e.g. "sma", "macd", "sar")
        params: Indicator parameters; missing ones use defaults
        sink: Result sink; None keeps results on the indicator

    Returns:
        The constructed indicator

    Raises:
        UnsupportedIndicatorError: If indicator_type is unknown
        ValueError: If params contains keys the indicator does not accept
        ParameterRangeError: If a parameter is out of range
    """
    key = indicator_type.strip().lower()
    factory_fn = _FACTORY.get(key)
    if factory_fn is None:
        raise UnsupportedIndicatorError(indicator_type, list_indicators())

    params = dict(params or {})
    _validate_params(key, params)
    return factory_fn(params, sink if sink is not None else ResultSeries())


def list_indicators() -> list[str]:
    """Sorted list of supported indicator types."""
    return sorted(_FACTORY)


def is_supported(indicator_type: str) -> bool:
    return indicator_type.strip().lower() in _FACTORY


# =============================================================================
# Indicator set declarations
# =============================================================================


class IndicatorSpecFileError(StreamTAError):
    """Raised when an indicator set file cannot be loaded."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


def _coerce(raw: str) -> Any:
    """Parse a command-line parameter value as int, float or string."""
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            continue
    return raw


@dataclass(frozen=True)
class IndicatorSpec:
    """
    Declarative description of one indicator.

    Attributes:
        type: Indicator type (see list_indicators())
        params: Constructor parameters
        name: Display name; defaults to the type plus its parameter values
    """

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    name: str | None = None

    def __post_init__(self):
        if not isinstance(self.type, str) or not self.type.strip():
            raise ValueError(f"IndicatorSpec: type must be a non-empty string, got {self.type!r}")
        if not is_supported(self.type):
            raise UnsupportedIndicatorError(self.type, list_indicators())
        _validate_params(self.type.strip().lower(), self.params)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if not self.params:
            return self.type
        values = "_".join(str(v) for v in self.params.values())
        return f"{self.type}_{values}"

    def build(self, sink: ResultSink | None = None) -> Indicator:
        return create_indicator(self.type, self.params, sink=sink)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        d: dict[str, Any] = {"type": self.type}
        if self.params:
            d["params"] = dict(self.params)
        if self.name:
            d["name"] = self.name
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> IndicatorSpec:
        """Create IndicatorSpec from dictionary."""
        if not isinstance(d, dict):
            raise ValueError(f"IndicatorSpec: expected a mapping, got {d!r}")
        if "type" not in d:
            raise ValueError(f"IndicatorSpec: missing 'type' in {d!r}")
        params = d.get("params") or {}
        if not isinstance(params, dict):
            raise ValueError(f"IndicatorSpec: 'params' must be a mapping, got {params!r}")
        return cls(
            type=d["type"],
            params=dict(params),
            name=d.get("name"),
        )

    @classmethod
    def from_string(cls, text: str) -> IndicatorSpec:
        """
        Parse "TYPE" or "TYPE:key=value,key=value".

        Example: "macd:fast_period=8,slow_period=21"
        """
        type_part, _, param_part = text.partition(":")
        params: dict[str, Any] = {}
        for item in filter(None, (p.strip() for p in param_part.split(","))):
            key, sep, value = item.partition("=")
            if not sep:
                raise ValueError(f"Expected key=value in indicator parameters, got '{item}'")
            params[key.strip()] = _coerce(value.strip())
        return cls(type=type_part.strip(), params=params)


def load_indicator_specs(path: Path | str) -> list[IndicatorSpec]:
    """
    Load an indicator set from a YAML file.

    Args:
        path: YAML file with a top-level "indicators" list

    Returns:
        IndicatorSpec list in file order

    Raises:
        IndicatorSpecFileError: If the file is missing or malformed
        UnsupportedIndicatorError: If an entry names an unknown type
        ValueError: If an entry has unknown parameters
    """
    yaml_path = Path(path)
    if not yaml_path.exists():
        raise IndicatorSpecFileError(yaml_path, "file not found")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise IndicatorSpecFileError(yaml_path, f"invalid YAML: {e}") from e

    if data is None:
        raise IndicatorSpecFileError(yaml_path, "file is empty")
    if not isinstance(data, dict) or not isinstance(data.get("indicators"), list):
        raise IndicatorSpecFileError(yaml_path, "expected a top-level 'indicators' list")

    specs = []
    for position, entry in enumerate(data["indicators"], start=1):
        if not isinstance(entry, dict):
            raise IndicatorSpecFileError(
                yaml_path, f"indicator #{position} must be a mapping with a 'type' key, got {entry!r}"
            )
        specs.append(IndicatorSpec.from_dict(entry))
    return specs
