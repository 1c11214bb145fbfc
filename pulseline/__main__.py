import argparse
import logging
import typing

import pulseline.config
import pulseline.notation
import pulseline.pulse_state
import pulseline.scheduler
import pulseline.subdivision


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _parse_pulses (text: str) -> typing.List[int]:

	"""
	Parse a comma-separated pulse list such as ``"1,3,5"``.
	"""

	try:
		return [int(part) for part in text.split(",") if part.strip()]
	except ValueError:
		raise argparse.ArgumentTypeError(f"Expected comma-separated integers, got {text!r}")


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Print the schedule, notation events and field text for a configured pulse cycle.
	"""

	parser = argparse.ArgumentParser(description="Pulse timing and notation engine")
	parser.add_argument("--config", default=pulseline.config.DEFAULT_CONFIG_PATH, help="Path to a YAML config file")
	parser.add_argument("--selected", type=_parse_pulses, default=[], help="Selected pulses, e.g. 1,3,5")
	parser.add_argument("--now", type=float, default=0.0, help="Current audio clock time in seconds")
	parser.add_argument("--step", type=int, default=None, help="Current step index for a resync")
	args = parser.parse_args(argv)

	config = pulseline.config.load_config(args.config)
	notation = config.notation

	timing = pulseline.subdivision.from_lg_and_tempo(notation.lg, config.scheduler.bpm)
	logger.info(f"Lg {notation.lg} at {config.scheduler.bpm} BPM: {timing.interval}s per pulse, {timing.duration}s per cycle")

	if timing.duration is not None:
		schedule = pulseline.scheduler.compute_next_zero(args.now, timing.duration, config.scheduler.look_ahead)
		logger.info(f"Next cycle start: {schedule}")

	if args.step is not None:
		resync = pulseline.scheduler.compute_resync_delay(args.step, notation.lg, config.scheduler.bpm)
		logger.info(f"Resync from step {args.step}: {resync}")

	state = pulseline.pulse_state.PulseSeqState()
	state.apply_validated_tokens(args.selected, [], lg=notation.lg)
	selection = state.get_current_selection()

	duration = notation.duration
	if duration is None:
		duration = pulseline.notation.duration_value_from_denominator(notation.denominator)

	events = pulseline.notation.build_pulse_events(
		lg=notation.lg,
		selected=selection.integers,
		duration=duration,
		dots=notation.dots,
		include_zero=notation.include_zero,
		fractional_selections=selection.fractions,
		numerator=notation.numerator,
		denominator=notation.denominator
	)

	for event in events:
		kind = "rest" if event.rest else "note"
		logger.info(f"  {event.pulse_index:>6}  {kind:<4}  {event.duration}{'.' * event.dots}")

	logger.info(f"Field text: {state.generate_field_text(lg=notation.lg)!r}")


if __name__ == "__main__":
	main()
