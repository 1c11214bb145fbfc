"""Which pulses and fractions a user may select under an active fraction.

With a fraction ``n/d`` active, only the multiples of ``n`` (the tuplet group
boundaries) and the remainder pulses after the last complete group are
selectable. Pulse 0 and pulse ``lg`` are the loop endpoints and are never
selectable directly.

For ``n=3`` and ``lg=11`` the last complete group starts at 9, so the
selectable pulses are 3, 6, 9 and the remainder pulse 10.
"""

import dataclasses
import math
import typing

import pulseline.scheduler


@dataclasses.dataclass (frozen=True)
class RemainderRange:

	"""
	The trailing pulses after the last complete cycle (``end`` is the ``lg`` endpoint).
	"""

	start: float
	end: float
	count: float


def _valid_numerator (numerator: typing.Any) -> typing.Optional[float]:

	value = pulseline.scheduler.normalize_number(numerator, None)

	if value is None or value <= 0:
		return None

	return value


def last_cycle_start (numerator: float, lg: float) -> float:

	"""Return the first pulse of the last complete cycle."""

	return math.floor(lg / numerator) * numerator


def is_integer_pulse_selectable (index: typing.Any, numerator: typing.Any, denominator: typing.Any, lg: typing.Any) -> bool:

	"""
	Return True if integer pulse ``index`` can be selected.

	``denominator`` does not affect the result; it is accepted so callers can
	pass the active fraction as-is.
	"""

	safe_index = pulseline.scheduler.normalize_number(index, None)
	safe_lg = pulseline.scheduler.normalize_number(lg, None)

	if safe_index is None or safe_lg is None or safe_lg <= 0:
		return False

	if safe_index == 0 or safe_index == safe_lg:
		return False

	num = _valid_numerator(numerator)

	if num is None:
		return True

	if safe_index % num == 0:
		return True

	return safe_index > last_cycle_start(num, safe_lg)


def is_pulse_remainder (index: typing.Any, numerator: typing.Any, lg: typing.Any) -> bool:

	"""
	Return True if ``index`` lies after the last complete cycle and is neither a multiple nor the endpoint.
	"""

	safe_index = pulseline.scheduler.normalize_number(index, None)
	safe_lg = pulseline.scheduler.normalize_number(lg, None)
	num = _valid_numerator(numerator)

	if safe_index is None or safe_lg is None or num is None:
		return False

	if safe_index <= 0 or safe_index > safe_lg:
		return False

	return last_cycle_start(num, safe_lg) < safe_index < safe_lg and safe_index % num != 0


def make_fraction_key (base: typing.Any, numerator: typing.Any, denominator: typing.Any) -> typing.Optional[str]:

	"""
	Build the stable ``"base+n/d"`` key for a fractional position, e.g. ``"3+1/4"``.

	Returns ``None`` unless ``0 < numerator < denominator``.
	"""

	safe_base = pulseline.scheduler.normalize_number(base, None)
	num = pulseline.scheduler.normalize_number(numerator, None)
	den = pulseline.scheduler.normalize_number(denominator, None)

	if safe_base is None or num is None or den is None:
		return None

	if den <= 0 or num <= 0 or num >= den:
		return None

	return f"{_format_number(safe_base)}+{_format_number(num)}/{_format_number(den)}"


def is_fraction_selectable (base: typing.Any, numerator: typing.Any, denominator: typing.Any, lg: typing.Any) -> bool:

	"""A fraction is selectable when its base pulse is."""

	return is_integer_pulse_selectable(base, numerator, denominator, lg)


def get_remainder_range (numerator: typing.Any, lg: typing.Any) -> typing.Optional[RemainderRange]:

	"""
	Return the remainder range for ``lg`` pulses grouped by ``numerator``, or ``None`` if ``lg`` divides evenly.
	"""

	num = _valid_numerator(numerator)
	safe_lg = pulseline.scheduler.normalize_number(lg, None)

	if num is None or safe_lg is None or safe_lg <= 0:
		return None

	remainder = safe_lg % num

	if remainder == 0:
		return None

	return RemainderRange(start=last_cycle_start(num, safe_lg) + 1, end=safe_lg, count=remainder)


def _format_number (value: float) -> str:

	if value == int(value):
		return str(int(value))

	return repr(value)
