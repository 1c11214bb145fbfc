"""Next-boundary and resync timing for periodic pulse playback.

Both functions are pure and cheap, so an audio-render callback can poll them
as often as it likes. Nothing here raises for bad clock readings: non-finite
values are replaced by a fallback, and a schedule that cannot exist (zero or
negative period, invalid tempo) is reported as ``None``.
"""

import dataclasses
import math
import numbers
import typing


DEFAULT_EPSILON = 1e-9

# Relative tolerance applied to the period so boundaries do not flicker.
PERIOD_EPSILON_RATIO = 1e-6


@dataclasses.dataclass (frozen=True)
class ScheduleInfo:

	"""
	Timing for the next periodic boundary.

	Attributes:
		previous_time: The boundary at or just before ``now``.
		event_time: When the event should logically sound.
		schedule_time: When the event should be handed to the audio engine
			(``event_time`` minus look-ahead, never earlier than ``now``).
	"""

	previous_time: float
	event_time: float
	schedule_time: float


@dataclasses.dataclass (frozen=True)
class ResyncInfo:

	"""
	How long to wait before re-anchoring playback on a downbeat.
	"""

	target_step_index: int
	delay_seconds: float


def normalize_number (value: typing.Any, fallback: typing.Optional[float] = 0.0) -> typing.Optional[float]:

	"""
	Coerce a value to a finite float, returning ``fallback`` when that is not possible.

	Accepts ints, floats and numeric strings. ``None``, NaN, infinities and
	anything unparseable all produce the fallback. ``None`` is not read as
	zero, so a missing step index makes :func:`compute_resync_delay` return
	``None`` rather than resync a full cycle.
	"""

	if value is None:
		return fallback

	try:
		number = float(value)

	except (TypeError, ValueError, OverflowError):
		return fallback

	if not math.isfinite(number):
		return fallback

	return number


def finite_number (value: typing.Any) -> typing.Optional[float]:

	"""
	Return ``value`` as a float only if it already is a finite real number.

	Unlike :func:`normalize_number` this does not parse strings; booleans are
	rejected too.
	"""

	if isinstance(value, bool) or not isinstance(value, numbers.Real):
		return None

	number = float(value)

	return number if math.isfinite(number) else None

def compute_next_zero (now: typing.Any, period: typing.Any, look_ahead: typing.Any = 0.0) -> typing.Optional[ScheduleInfo]:

	"""
	Find the next multiple of ``period`` at or after ``now``.

	Parameters:
		now: Current clock time in seconds (clamped at 0).
		period: Seconds between boundaries. Must be finite and positive.
		look_ahead: Lead time in seconds before the event at which it must be
			scheduled (clamped at 0).

	Returns:
		A :class:`ScheduleInfo`, or ``None`` when the period is invalid.

	Example:
		```python
		info = compute_next_zero(now=1.25, period=2.0, look_ahead=0.5)
		# info.previous_time == 0.0, info.event_time == 2.0, info.schedule_time == 1.5
		```
	"""

	safe_period = normalize_number(period, None)

	if safe_period is None or safe_period <= 0:
		return None

	safe_now = max(0.0, typing.cast(float, normalize_number(now)))
	safe_look_ahead = max(0.0, typing.cast(float, normalize_number(look_ahead)))
	epsilon = max(DEFAULT_EPSILON, safe_period * PERIOD_EPSILON_RATIO)

	quotient = math.floor((safe_now + epsilon) / safe_period)
	previous_time = quotient * safe_period

	if safe_now - previous_time <= epsilon:
		event_time = previous_time
	else:
		event_time = (quotient + 1) * safe_period

	schedule_time = event_time - safe_look_ahead

	# Too late to make this boundary; take the one after.
	if schedule_time + epsilon < safe_now:
		event_time += safe_period
		schedule_time = event_time - safe_look_ahead

	return ScheduleInfo(
		previous_time=previous_time,
		event_time=event_time,
		schedule_time=max(safe_now, schedule_time)
	)


def compute_resync_delay (step_index: typing.Any, total_pulses: typing.Any, bpm: typing.Any) -> typing.Optional[ResyncInfo]:

	"""
	Compute the wait until the next downbeat (step 0) of a ``total_pulses`` cycle.

	The step axis is treated like a clock whose period is ``total_pulses``, so
	a sequence already on step 0 resyncs immediately and a step past the end of
	the cycle waits for the following boundary.

	Returns ``None`` when ``step_index < 0``, ``total_pulses <= 0`` or
	``bpm <= 0`` (or any of them is not a finite number, ``None`` included).
	"""

	total = normalize_number(total_pulses, None)
	current_step = normalize_number(step_index, None)
	tempo = normalize_number(bpm, None)

	if total is None or total <= 0:
		return None

	if current_step is None or current_step < 0:
		return None

	if tempo is None or tempo <= 0:
		return None

	zero_info = compute_next_zero(now=current_step, period=total)

	if zero_info is None:
		return None

	steps_until_zero = max(0.0, zero_info.event_time - current_step)
	seconds_per_step = 60.0 / tempo

	return ResyncInfo(
		target_step_index=0,
		delay_seconds=steps_until_zero * seconds_per_step
	)
