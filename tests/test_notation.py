import math

import pytest

import pulseline.constants.durations as dur
import pulseline.notation
import pulseline.pulse_state
import pulseline.selectability


def _indices (events: list) -> list:

	return [event.pulse_index for event in events]


def test_selected_pulses_become_notes () -> None:

	"""Without a fraction only pulse 0 and the selected pulses are written, all as notes."""

	events = pulseline.notation.build_pulse_events(lg=8, selected={1, 3, 5})

	assert _indices(events) == [0, 1, 3, 5]
	assert all(not event.rest for event in events)
	assert all(event.duration == dur.EIGHTH for event in events)


def test_fraction_writes_groups_and_remainder () -> None:

	"""With n=3 every group boundary and the trailing remainder pulse are written."""

	events = pulseline.notation.build_pulse_events(lg=8, numerator=3, selected=set())

	assert _indices(events) == [0, 3, 6, 7]
	assert [event.rest for event in events] == [False, True, True, True]

	remainder = events[-1]
	assert remainder.duration == dur.QUARTER
	assert remainder.dots == 0


def test_remainder_ignores_default_duration () -> None:

	"""Group boundaries take the default duration and dots, remainders do not."""

	events = pulseline.notation.build_pulse_events(lg=8, numerator=3, duration="16", dots=1)

	assert [(event.duration, event.dots) for event in events] == [("16", 1), ("16", 1), ("16", 1), ("q", 0)]


def test_selected_boundary_is_a_note () -> None:

	"""A selected group boundary is a note; unselected ones stay rests."""

	events = pulseline.notation.build_pulse_events(lg=9, numerator=3, selected=[3])

	assert _indices(events) == [0, 3, 6]
	assert [event.rest for event in events] == [False, False, True]


def test_inner_selection_is_hidden_under_fraction () -> None:

	"""Selected pulses inside a tuplet group are not written."""

	events = pulseline.notation.build_pulse_events(lg=9, numerator=3, selected=[1, 4])

	assert _indices(events) == [0, 3, 6]


def test_exclude_zero () -> None:

	"""Pulse 0 can be left out."""

	events = pulseline.notation.build_pulse_events(lg=4, selected=[2], include_zero=False)

	assert _indices(events) == [2]


def test_invalid_lg_gives_no_events () -> None:

	"""Empty or invalid timelines produce no events."""

	for lg in (0, -1, 0.5, math.nan, math.inf, None, "8"):
		assert pulseline.notation.build_pulse_events(lg=lg, selected=[1]) == []


def test_fractional_lg_is_floored () -> None:

	"""A fractional Lg is rounded down."""

	events = pulseline.notation.build_pulse_events(lg=4.7, selected=[3, 4])

	assert _indices(events) == [0, 3]


def test_duration_and_dots_defaults () -> None:

	"""Blank durations fall back to an eighth; dots are floored and never negative."""

	assert pulseline.notation.build_pulse_events(lg=1, duration="  ")[0].duration == dur.EIGHTH
	assert pulseline.notation.build_pulse_events(lg=1, duration=None)[0].duration == dur.EIGHTH
	assert pulseline.notation.build_pulse_events(lg=1, duration=" q ")[0].duration == dur.QUARTER
	assert pulseline.notation.build_pulse_events(lg=1, dots=-2)[0].dots == 0
	assert pulseline.notation.build_pulse_events(lg=1, dots=1.7)[0].dots == 1


def test_selected_positions_are_quantized () -> None:

	"""Near-integer floats and numeric strings select the same pulse."""

	events = pulseline.notation.build_pulse_events(lg=8, selected=[1.0000000001, "3", None, "x"])

	assert _indices(events) == [0, 1, 3]


def test_new_fractional_override_is_sorted_in () -> None:

	"""An override between integer pulses becomes a new event in position order."""

	override = pulseline.notation.FractionalOverride(pulse_index=1.5, duration="16", selection_key="1+1/2")
	events = pulseline.notation.build_pulse_events(lg=8, selected={1, 3}, fractional_selections=[override])

	assert _indices(events) == [0, 1, 1.5, 3]

	added = events[2]
	assert added.duration == "16"
	assert added.dots == 0
	assert added.rest is False
	assert added.selection_key == "1+1/2"


def test_override_updates_matching_event () -> None:

	"""An override at an existing pulse replaces its rest flag, duration and tags."""

	override = {"pulse_index": 3.0000000001, "rest": True, "duration": "h", "dots": 1, "source": "editor"}
	events = pulseline.notation.build_pulse_events(lg=8, selected={1, 3}, fractional_selections=[override])

	assert _indices(events) == [0, 1, 3]

	target = events[2]
	assert target.rest is True
	assert target.duration == "h"
	assert target.dots == 1
	assert target.source == "editor"


def test_override_cannot_change_remainder_duration () -> None:

	"""Remainder pulses keep quarter duration and no dots, but the rest flag follows the override."""

	override = {"pulseIndex": 7, "rest": False, "duration": "h", "dots": 2, "selectionKey": "seven"}
	events = pulseline.notation.build_pulse_events(lg=8, numerator=3, fractional_selections=[override])

	remainder = events[-1]
	assert remainder.pulse_index == 7
	assert remainder.duration == dur.QUARTER
	assert remainder.dots == 0
	assert remainder.rest is False
	assert remainder.selection_key == "seven"


def test_new_override_in_remainder_region () -> None:

	"""A new override after the last complete group is forced to a quarter."""

	override = pulseline.notation.FractionalOverride(pulse_index=6.5, duration="32", dots=1)
	events = pulseline.notation.build_pulse_events(lg=8, numerator=3, fractional_selections=[override])

	assert _indices(events) == [0, 3, 6, 6.5, 7]
	assert (events[3].duration, events[3].dots) == (dur.QUARTER, 0)


def test_override_inside_group_keeps_requested_duration () -> None:

	"""Overrides inside a complete group use their own duration."""

	override = pulseline.notation.FractionalOverride(pulse_index=1.5, duration="16")
	events = pulseline.notation.build_pulse_events(lg=8, numerator=3, fractional_selections=[override])

	assert _indices(events) == [0, 1.5, 3, 6, 7]
	assert events[1].duration == "16"


def test_stored_fraction_selection_as_override () -> None:

	"""Fractions from the selection state can be passed straight through."""

	fraction = pulseline.pulse_state.FractionSelection(key="2+1/2", value=2.5, display="2.2", selection_key="2+1/2")
	events = pulseline.notation.build_pulse_events(lg=4, fractional_selections=[fraction])

	assert _indices(events) == [0, 2.5]
	assert events[1].selection_key == "2+1/2"
	assert events[1].rest is False


def test_override_without_position_is_skipped () -> None:

	"""Overrides with no usable position are ignored."""

	events = pulseline.notation.build_pulse_events(lg=4, fractional_selections=[{"rest": True}, {"value": math.nan}])

	assert _indices(events) == [0]


def test_events_sorted_with_many_overrides () -> None:

	"""Overrides given out of order still produce an ascending event list."""

	overrides = [{"value": v} for v in (3.75, 0.5, 2.25, 1.0)]
	events = pulseline.notation.build_pulse_events(lg=4, selected=[2], fractional_selections=overrides)

	positions = _indices(events)
	assert positions == sorted(positions)
	assert positions == [0, 0.5, 1.0, 2, 2.25, 3.75]


def test_make_pulse_index_key () -> None:

	"""Positions within a millionth share a key; invalid values have none."""

	assert pulseline.notation.make_pulse_index_key(1.5) == 1500000
	assert pulseline.notation.make_pulse_index_key(1.5000000001) == pulseline.notation.make_pulse_index_key(1.5)
	assert pulseline.notation.make_pulse_index_key(math.nan) is None


@pytest.mark.parametrize("denominator, expected", [
	(1, "w"), (2, "h"), (4, "q"), (8, "8"), (16, "16"), (32, "32"), (64, "64"),
	(3, "8"), (5, "16"), (6, "16"), (7, "16"), (9, "32"),
	(10, "16"), (12, "16"), (20, "32"), (100, "64"),
	(3.6, "q"), (0, "w"),
])
def test_duration_value_from_denominator (denominator: float, expected: str) -> None:

	"""Denominators map to exact, tuplet-base or next-band duration codes."""

	assert pulseline.notation.duration_value_from_denominator(denominator) == expected


def test_duration_value_from_invalid_denominator () -> None:

	"""Non-numeric denominators use the default eighth."""

	for denominator in (math.nan, None, "4", math.inf):
		assert pulseline.notation.duration_value_from_denominator(denominator) == dur.DEFAULT


def test_override_duration_applies_without_fraction () -> None:

	"""Without a numerator no pulse is a remainder, so overrides set duration and dots."""

	overrides = [
		{"pulse_index": 3, "duration": "h", "dots": 1},
		{"pulse_index": 5.5, "duration": "16", "dots": 2},
	]
	events = pulseline.notation.build_pulse_events(lg=8, selected=[3], duration="q", fractional_selections=overrides)

	assert _indices(events) == [0, 3, 5.5]
	assert (events[0].duration, events[0].dots) == ("q", 0)
	assert (events[1].duration, events[1].dots) == ("h", 1)
	assert (events[2].duration, events[2].dots) == ("16", 2)


def test_remainder_rule_matches_selectability () -> None:

	"""Events forced to a quarter are exactly the remainder pulses."""

	events = pulseline.notation.build_pulse_events(lg=11, numerator=3, duration="16")

	for event in events:
		forced = event.duration == dur.QUARTER
		assert forced == pulseline.selectability.is_pulse_remainder(event.pulse_index, 3, 11)
