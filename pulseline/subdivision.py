"""Pulse timing and subdivision grids derived from Lg, tempo and a fraction.

Pulses run ``0 .. lg``: pulse ``lg`` is the end marker of the cycle, not a
playable pulse. A fraction ``numerator/denominator`` groups ``numerator``
pulses into one cycle and splits that cycle into ``denominator`` equal
subdivisions, e.g. ``3/2`` over 12 pulses gives four cycles with a
subdivision every 1.5 pulses.
"""

import dataclasses
import math
import typing

import pulseline.scheduler


@dataclasses.dataclass (frozen=True)
class PulseTiming:

	"""
	Validated pulse count and tempo with the derived durations.

	Any field that cannot be computed is ``None``.
	"""

	pulses: typing.Optional[float]
	tempo: typing.Optional[float]
	interval: typing.Optional[float]
	duration: typing.Optional[float]


@dataclasses.dataclass (frozen=True)
class Subdivision:

	"""
	One subdivision point in the grid.
	"""

	cycle_index: int
	subdivision_index: int
	position: float
	absolute_index: int


@dataclasses.dataclass (frozen=True)
class SubdivisionGrid:

	"""
	All subdivision points of complete cycles, ordered by position.
	"""

	cycles: int
	subdivisions: typing.List[Subdivision]
	numerator: typing.Optional[float]
	denominator: typing.Optional[float]


def _positive_or_none (value: typing.Any) -> typing.Optional[float]:

	number = pulseline.scheduler.normalize_number(value, None)

	if number is None or number <= 0:
		return None

	return number


def from_lg_and_tempo (lg: typing.Any, tempo: typing.Any) -> PulseTiming:

	"""
	Compute the seconds per pulse and the cycle length for ``lg`` pulses at ``tempo`` BPM.

	Example:
		```python
		from_lg_and_tempo(8, 120)
		# PulseTiming(pulses=8.0, tempo=120.0, interval=0.5, duration=4.0)
		```
	"""

	pulses = _positive_or_none(lg)
	valid_tempo = _positive_or_none(tempo)

	interval = 60.0 / valid_tempo if valid_tempo is not None else None
	duration = interval * pulses if interval is not None and pulses is not None else None

	return PulseTiming(pulses=pulses, tempo=valid_tempo, interval=interval, duration=duration)


def grid_from_origin (
	lg: typing.Any,
	numerator: typing.Any,
	denominator: typing.Any,
	offset: typing.Any = 0.0
) -> SubdivisionGrid:

	"""
	Build the subdivision positions of every complete cycle, starting from pulse 0.

	Parameters:
		lg: Total pulses.
		numerator: Pulses per cycle.
		denominator: Subdivisions per cycle.
		offset: Shift applied to every position (default 0).

	Trailing pulses that do not fill a whole cycle get no subdivisions. A
	non-integer denominator is rounded up to count the points per cycle, so
	``absolute_index`` always advances by whole points.
	"""

	total = _positive_or_none(lg)
	num = _positive_or_none(numerator)
	den = _positive_or_none(denominator)
	base_offset = pulseline.scheduler.normalize_number(offset) or 0.0

	if total is None or num is None or den is None:
		return SubdivisionGrid(cycles=0, subdivisions=[], numerator=num, denominator=den)

	cycles = math.floor(total / num)

	if cycles <= 0:
		return SubdivisionGrid(cycles=0, subdivisions=[], numerator=num, denominator=den)

	per_cycle = int(math.ceil(den))
	step = num / den
	subdivisions: typing.List[Subdivision] = []

	for cycle_index in range(cycles):

		cycle_start = cycle_index * num + base_offset

		for subdivision_index in range(per_cycle):
			subdivisions.append(
				Subdivision(
					cycle_index=cycle_index,
					subdivision_index=subdivision_index,
					position=cycle_start + subdivision_index * step,
					absolute_index=cycle_index * per_cycle + subdivision_index
				)
			)

	return SubdivisionGrid(cycles=cycles, subdivisions=subdivisions, numerator=num, denominator=den)
