"""Typed configuration for the pulseline command line.

Configuration is read from a YAML file with two optional sections::

    scheduler:
      bpm: 100
      look_ahead: 0.1
    notation:
      lg: 10
      numerator: 3
      denominator: 2
      duration: "8"
      dots: 0
      include_zero: true

Missing sections or keys keep their defaults. Unknown keys are rejected so
typos do not silently fall back to defaults.
"""

import dataclasses
import logging
import os
import typing

import yaml


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "pulseline.yaml"


@dataclasses.dataclass
class SchedulerConfig:

	"""
	Playback timing.

	Attributes:
		bpm: Pulses per minute.
		look_ahead: Seconds before an event at which it is handed to the audio engine.
	"""

	bpm: float = 120.0
	look_ahead: float = 0.1


@dataclasses.dataclass
class NotationConfig:

	"""
	Inputs to :func:`pulseline.notation.build_pulse_events`.

	Attributes:
		lg: Pulses per cycle.
		numerator: Pulses per tuplet group (``None`` for no fraction).
		denominator: Subdivisions per group (``None`` for no fraction).
		duration: Default duration code. When ``None`` it is derived from the denominator.
		dots: Default dot count.
		include_zero: Whether pulse 0 is written.
	"""

	lg: int = 8
	numerator: typing.Optional[int] = None
	denominator: typing.Optional[int] = None
	duration: typing.Optional[str] = None
	dots: int = 0
	include_zero: bool = True


@dataclasses.dataclass
class EngineConfig:

	"""Top-level configuration."""

	scheduler: SchedulerConfig = dataclasses.field(default_factory=SchedulerConfig)
	notation: NotationConfig = dataclasses.field(default_factory=NotationConfig)


SectionType = typing.TypeVar("SectionType")


def _build_section (section_type: typing.Type[SectionType], name: str, data: typing.Any) -> SectionType:

	if data is None:
		return section_type()

	if not isinstance(data, dict):
		raise ValueError(f"Config section '{name}' must be a mapping")

	known = {field.name for field in dataclasses.fields(section_type)}  # type: ignore[arg-type]
	unknown = sorted(set(data) - known)

	if unknown:
		raise ValueError(f"Unknown keys in config section '{name}': {unknown}")

	return section_type(**data)


def parse_config (data: typing.Any) -> EngineConfig:

	"""
	Build an :class:`EngineConfig` from an already-loaded YAML document.
	"""

	if data is None:
		return EngineConfig()

	if not isinstance(data, dict):
		raise ValueError("Config document must be a mapping")

	unknown = sorted(set(data) - {"scheduler", "notation"})

	if unknown:
		raise ValueError(f"Unknown config sections: {unknown}")

	return EngineConfig(
		scheduler=_build_section(SchedulerConfig, "scheduler", data.get("scheduler")),
		notation=_build_section(NotationConfig, "notation", data.get("notation"))
	)


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> EngineConfig:

	"""
	Load configuration from a YAML file, falling back to defaults if it does not exist.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return EngineConfig()

	with open(config_path, 'r') as f:
		return parse_config(yaml.safe_load(f))
