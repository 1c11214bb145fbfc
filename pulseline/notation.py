"""Turn a pulse selection into an ordered list of notation events.

The builder walks the integer pulses of a cycle, decides which ones appear on
the staff (as notes or rests), and then merges explicit overrides at
fractional positions on top. With a fraction ``numerator/denominator`` active,
every tuplet-group boundary and every remainder pulse is written out whether
selected or not, so the renderer always sees complete groups.

Fractional positions are compared through a quantized integer key
(``round(position * 1e6)``) so that ``1.5`` and ``1.4999999999`` land on the
same event.
"""

import collections.abc
import dataclasses
import logging
import math
import typing

import pulseline.constants.durations
import pulseline.scheduler
import pulseline.selectability


logger = logging.getLogger(__name__)

PULSE_INDEX_KEY_SCALE = 1e6


@dataclasses.dataclass
class NotationEvent:

	"""
	A single note or rest to be drawn.

	Attributes:
		pulse_index: Position in pulses (may be fractional).
		duration: Duration code (see :mod:`pulseline.constants.durations`).
		dots: Number of augmentation dots.
		rest: True to draw a rest instead of a note.
		selection_key: Key of the fraction selection this event came from, if any.
		source: Free-form tag identifying who produced the override.
	"""

	pulse_index: float
	duration: str
	dots: int = 0
	rest: bool = False
	selection_key: typing.Optional[str] = None
	source: typing.Optional[str] = None


@dataclasses.dataclass
class FractionalOverride:

	"""
	An explicit event at a (usually fractional) pulse position.

	``duration`` and ``dots`` left as ``None`` keep the builder defaults.
	"""

	pulse_index: float
	rest: bool = False
	duration: typing.Optional[str] = None
	dots: typing.Optional[int] = None
	selection_key: typing.Optional[str] = None
	source: typing.Optional[str] = None


OverrideLike = typing.Union[FractionalOverride, typing.Mapping[str, typing.Any], typing.Any]


def _round_half_up (value: float) -> int:

	return int(math.floor(value + 0.5))


def make_pulse_index_key (value: typing.Any) -> typing.Optional[int]:

	"""
	Quantize a pulse position to an integer key (millionths of a pulse).

	Returns ``None`` for anything that is not a finite number.
	"""

	number = pulseline.scheduler.normalize_number(value, None)

	if number is None:
		return None

	return _round_half_up(number * PULSE_INDEX_KEY_SCALE)


def normalize_selected_set (selected: typing.Optional[typing.Iterable[typing.Any]]) -> typing.Set[int]:

	"""
	Convert selected pulse positions to a set of quantized keys, dropping invalid values.
	"""

	normalized: typing.Set[int] = set()

	if selected is None:
		return normalized

	for value in selected:
		key = make_pulse_index_key(value)
		if key is not None:
			normalized.add(key)

	return normalized


def duration_value_from_denominator (denominator: typing.Any) -> str:

	"""
	Map a fraction denominator to a duration code.

	Powers of two map exactly (``4`` is a quarter, ``16`` a sixteenth). Tuplet
	denominators use the base figure the tuplet is written with: ``3`` is an
	eighth (triplet), ``5``-``7`` a sixteenth, ``9`` a thirty-second. Anything
	else rounds up to the next band. Non-numeric input gives the default eighth.
	"""

	number = pulseline.scheduler.finite_number(denominator)

	if number is None:
		return pulseline.constants.durations.DEFAULT

	value = max(1, _round_half_up(number))

	if value in pulseline.constants.durations.BY_DENOMINATOR:
		return pulseline.constants.durations.BY_DENOMINATOR[value]

	if value == 3:
		return pulseline.constants.durations.EIGHTH

	if 5 <= value <= 7:
		return pulseline.constants.durations.SIXTEENTH

	if value == 9:
		return pulseline.constants.durations.THIRTY_SECOND

	if value < 16:
		return pulseline.constants.durations.SIXTEENTH

	if value < 32:
		return pulseline.constants.durations.THIRTY_SECOND

	return pulseline.constants.durations.SIXTY_FOURTH


def _field (raw: OverrideLike, *names: str) -> typing.Any:

	"""Read the first present attribute or mapping key out of ``names``."""

	for name in names:

		if isinstance(raw, collections.abc.Mapping):
			value = raw.get(name)
		else:
			value = getattr(raw, name, None)

		if value is not None:
			return value

	return None


def build_pulse_events (
	lg: typing.Any,
	selected: typing.Optional[typing.Iterable[typing.Any]] = None,
	duration: typing.Any = pulseline.constants.durations.DEFAULT,
	dots: typing.Any = 0,
	include_zero: bool = True,
	fractional_selections: typing.Optional[typing.Sequence[OverrideLike]] = None,
	numerator: typing.Any = None,
	denominator: typing.Any = None
) -> typing.List[NotationEvent]:

	"""
	Build the notation events for one cycle of ``lg`` pulses.

	Parameters:
		lg: Pulse count. Non-finite or non-positive values give an empty list.
		selected: Selected integer pulses (any iterable of numbers).
		duration: Default duration code for every event (blank or non-string
			values fall back to an eighth).
		dots: Default dot count (floored, never negative).
		include_zero: Whether pulse 0 is written (it is never a rest).
		fractional_selections: Explicit overrides, applied in order after the
			integer pass. Each item may be a :class:`FractionalOverride`, any
			object with ``pulse_index`` or ``value`` attributes (such as a
			stored fraction selection), or a mapping with the same keys
			(``pulseIndex``/``selectionKey`` are accepted too).
		numerator: Pulses per tuplet group. When valid, every group boundary
			and every remainder pulse is written even if not selected.
		denominator: Subdivisions per group. Accepted with the numerator so
			callers can pass the active fraction as-is; durations come from
			``duration`` (see :func:`duration_value_from_denominator`).

	Remainder pulses (after the last complete group) are always quarter notes
	without dots, and overrides at those positions cannot change that.

	Example:
		```python
		events = build_pulse_events(lg=8, numerator=3)
		[e.pulse_index for e in events]  # [0, 3, 6, 7]
		events[-1].duration              # "q"
		```
	"""

	events: typing.List[NotationEvent] = []

	safe_lg_value = pulseline.scheduler.finite_number(lg)
	safe_lg = math.floor(safe_lg_value) if safe_lg_value is not None and safe_lg_value > 0 else 0

	if safe_lg <= 0:
		return events

	if isinstance(duration, str) and duration.strip():
		resolved_duration = duration.strip()
	else:
		resolved_duration = pulseline.constants.durations.DEFAULT

	dots_value = pulseline.scheduler.finite_number(dots)
	resolved_dots = max(0, math.floor(dots_value)) if dots_value is not None else 0

	num = pulseline.scheduler.finite_number(numerator)
	if num is not None and num <= 0:
		num = None

	normalized_selected = normalize_selected_set(selected)
	entry_lookup: typing.Dict[int, NotationEvent] = {}

	# Without a fraction there are no remainder pulses.
	last_cycle_start = pulseline.selectability.last_cycle_start(num, safe_lg) if num is not None else None

	def is_remainder (position: float) -> bool:
		return last_cycle_start is not None and last_cycle_start < position < safe_lg

	def should_include (index: int) -> bool:

		if index == 0:
			return include_zero

		if num is None:
			return _round_half_up(index * PULSE_INDEX_KEY_SCALE) in normalized_selected

		return index % num == 0 or is_remainder(index)

	for index in range(safe_lg):

		if not should_include(index):
			continue

		key = _round_half_up(index * PULSE_INDEX_KEY_SCALE)
		remainder = is_remainder(index)

		event = NotationEvent(
			pulse_index=index,
			duration=pulseline.constants.durations.REMAINDER if remainder else resolved_duration,
			dots=0 if remainder else resolved_dots,
			rest=index != 0 and key not in normalized_selected
		)

		events.append(event)
		entry_lookup[key] = event

	if not fractional_selections:
		return events

	for raw in fractional_selections:

		position = pulseline.scheduler.finite_number(_field(raw, "pulse_index", "pulseIndex"))

		if position is None:
			position = pulseline.scheduler.finite_number(_field(raw, "value"))

		if position is None:
			logger.debug(f"Skipping fractional override without a position: {raw!r}")
			continue

		key = _round_half_up(position * PULSE_INDEX_KEY_SCALE)
		remainder = is_remainder(position)

		rest = bool(_field(raw, "rest"))
		raw_duration = _field(raw, "duration")
		raw_dots = pulseline.scheduler.finite_number(_field(raw, "dots"))
		selection_key = _field(raw, "selection_key", "selectionKey")
		source = _field(raw, "source")

		target = entry_lookup.get(key)

		if target is not None:

			target.rest = rest

			if raw_duration is not None and not remainder:
				target.duration = raw_duration

			if raw_dots is not None and not remainder:
				target.dots = max(0, math.floor(raw_dots))

			if selection_key is not None:
				target.selection_key = selection_key

			if source is not None:
				target.source = source

			continue

		if remainder:
			extra_duration = pulseline.constants.durations.REMAINDER
			extra_dots = 0
		else:
			extra_duration = raw_duration if raw_duration is not None else resolved_duration
			extra_dots = max(0, math.floor(raw_dots)) if raw_dots is not None else resolved_dots

		extra = NotationEvent(
			pulse_index=position,
			duration=extra_duration,
			dots=extra_dots,
			rest=rest,
			selection_key=selection_key,
			source=source
		)

		events.append(extra)
		entry_lookup[key] = extra

	events.sort(key=lambda event: event.pulse_index)

	return events
