"""The single source of truth for which pulses and fractions are selected.

:class:`PulseSeqState` owns two stores:

- :class:`PulseMemory` - one boolean per integer pulse, indexed ``0 .. lg``
  (slot ``lg`` exists so the end marker has a place, but is never selected).
- :class:`FractionStore` - the selected fractional positions, keyed by a
  stable string such as ``"2+1/2"``, plus the entry order and lookup built the
  last time the field text was rendered.

Tokens arrive already parsed and validated; this module only applies them,
renders the canonical field text (``"  1  3  2.2  "``) and hands out
snapshots. Mutations are not synchronized and must come from one thread.
"""

import collections.abc
import dataclasses
import logging
import math
import typing

import pulseline.scheduler


logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "  "

# Text range of each rendered token, keyed by entry key.
Ranges = typing.Dict[str, typing.Tuple[int, int]]


@dataclasses.dataclass
class FractionSelection:

	"""
	A selected fractional pulse position.

	Attributes:
		key: Stable identity, e.g. ``"2+1/2"``.
		value: Position in pulses (``2.5``).
		display: Canonical text for the field (``"2.2"``).
		raw_label: The text the user originally typed, preferred over
			``display`` when the field is rendered without a valid Lg.
		duration, dots, rest: Notation overrides passed through to the
			event builder.
		selection_key, source: Tags passed through to the event builder.
	"""

	key: str
	value: float
	display: str = ""
	raw_label: typing.Optional[str] = None
	duration: typing.Optional[str] = None
	dots: typing.Optional[int] = None
	rest: typing.Optional[bool] = None
	selection_key: typing.Optional[str] = None
	source: typing.Optional[str] = None


	@classmethod
	def from_mapping (cls, data: typing.Mapping[str, typing.Any]) -> "FractionSelection":

		"""Build a selection from a plain mapping, ignoring keys it does not know."""

		names = {field.name for field in dataclasses.fields(cls)}
		aliases = {"rawLabel": "raw_label", "selectionKey": "selection_key"}
		values: typing.Dict[str, typing.Any] = {}

		for name, value in data.items():
			name = aliases.get(name, name)
			if name in names:
				values[name] = value

		values.setdefault("key", "")
		values["value"] = pulseline.scheduler.normalize_number(values.get("value"), math.nan)

		return cls(**values)


@dataclasses.dataclass (frozen=True)
class FieldEntry:

	"""
	One token of the field text as last rendered.
	"""

	key: str
	value: float
	display: str
	type: str


@dataclasses.dataclass
class Selection:

	"""
	A snapshot of the current selection. Mutating it does not affect the state.
	"""

	integers: typing.List[int]
	fractions: typing.List[FractionSelection]


class PulseMemory:

	"""Growable list of per-pulse selection flags."""

	def __init__ (self) -> None:

		self.data: typing.List[bool] = []


	def __len__ (self) -> int:

		return len(self.data)


	def ensure (self, lg: float) -> None:

		"""Grow the list so it has a slot for every pulse up to and including ``lg``."""

		while len(self.data) <= lg:
			self.data.append(False)


	def is_selected (self, index: int) -> bool:

		return 0 <= index < len(self.data) and self.data[index]


	def selected (self) -> typing.List[int]:

		"""Return every selected index in ascending order."""

		return [index for index, flag in enumerate(self.data) if flag]


class FractionStore:

	"""Selected fractions plus the entry order and lookup of the last rendered field."""

	def __init__ (self) -> None:

		self.selection_state: typing.Dict[str, FractionSelection] = {}
		self.entry_order: typing.List[str] = []
		self.entry_lookup: typing.Dict[str, FieldEntry] = {}


	def clear (self) -> None:

		self.selection_state.clear()
		self.entry_order = []
		self.entry_lookup.clear()


def _valid_lg (lg: typing.Any) -> typing.Optional[float]:

	value = pulseline.scheduler.finite_number(lg)

	if value is None or value <= 0:
		return None

	return value


def _render (tokens: typing.Sequence[typing.Tuple[str, str]], ranges: typing.Optional[Ranges]) -> str:

	"""Join ``(key, display)`` tokens with double spaces, recording each token's offsets."""

	if not tokens:
		return FIELD_SEPARATOR

	position = 0

	for key, display in tokens:

		start = position + len(FIELD_SEPARATOR)
		end = start + len(display)

		if ranges is not None:
			ranges[key] = (start, end)

		position = end

	return FIELD_SEPARATOR + FIELD_SEPARATOR.join(display for _, display in tokens) + FIELD_SEPARATOR


class PulseSeqState:

	"""
	Selection state for a pulse sequence.

	Example:
		```python
		state = PulseSeqState()
		state.apply_validated_tokens([1, 3], [], lg=8)
		state.generate_field_text(lg=8)  # "  1  3  "
		```
	"""

	def __init__ (self) -> None:

		self.memory = PulseMemory()
		self.fractions = FractionStore()


	def apply_validated_tokens (
		self,
		integers: typing.Iterable[int],
		fractions: typing.Iterable[typing.Union[FractionSelection, typing.Mapping[str, typing.Any]]],
		lg: typing.Any = None
	) -> None:

		"""
		Replace the current selection with already-validated tokens.

		With a valid ``lg`` every pulse ``1 .. lg-1`` is cleared and the given
		integers below ``lg`` are set. With an invalid ``lg`` the integer
		memory is left as it is. The fraction store is always cleared and
		refilled; entries without a key are skipped.
		"""

		safe_lg = _valid_lg(lg)

		if safe_lg is not None:

			self.memory.ensure(safe_lg)

			for index in range(1, math.ceil(safe_lg)):
				self.memory.data[index] = False

			for index in integers:
				if 0 <= index < safe_lg:
					self.memory.data[int(index)] = True

		else:
			logger.debug(f"Ignoring integer tokens for invalid Lg {lg!r}")

		self.fractions.selection_state.clear()

		for entry in fractions:

			if isinstance(entry, collections.abc.Mapping):
				entry = FractionSelection.from_mapping(entry)

			if entry is None or not entry.key:
				continue

			self.fractions.selection_state[entry.key] = dataclasses.replace(entry)

		logger.debug(f"Applied selection: {self.memory.selected()} + {list(self.fractions.selection_state)}")


	def generate_field_text (self, lg: typing.Any = None, ranges: typing.Optional[Ranges] = None) -> str:

		"""
		Render the selection as canonical field text.

		With a valid ``lg`` the integers ``1 .. lg-1`` come first in ascending
		order, followed by the fraction displays sorted as text. Without one,
		every selected integer and fraction is listed by position, fractions
		show the label the user typed when there is one, and the entry order
		and lookup of the fraction store are rebuilt.

		Tokens are separated and surrounded by two spaces, so an empty
		selection renders as exactly two spaces. When ``ranges`` is given it
		receives the ``(start, end)`` offsets of every token, keyed by the
		fraction key or the integer's text.
		"""

		safe_lg = _valid_lg(lg)

		if safe_lg is not None:

			integer_tokens = [
				(str(index), str(index))
				for index in range(1, math.ceil(safe_lg))
				if self.memory.is_selected(index)
			]

			fraction_tokens = sorted(
				((entry.key, entry.display or "") for entry in self.fractions.selection_state.values()),
				key=lambda token: token[1]
			)

			return _render(integer_tokens + fraction_tokens, ranges)

		entries: typing.List[FieldEntry] = [
			FieldEntry(key=str(index), value=index, display=str(index), type="int")
			for index in self.memory.selected()
		]

		for entry in self.fractions.selection_state.values():
			entries.append(
				FieldEntry(
					key=entry.key,
					value=pulseline.scheduler.normalize_number(entry.value, math.nan),
					display=entry.raw_label or entry.display or "",
					type="fraction"
				)
			)

		# Unpositioned fractions go last.
		entries.sort(key=lambda entry: (math.isnan(entry.value), entry.value))

		self.fractions.entry_order = [entry.key for entry in entries]
		self.fractions.entry_lookup = {entry.key: entry for entry in entries}

		return _render([(entry.key, entry.display) for entry in entries], ranges)


	def sync_memory (self, lg: typing.Any) -> None:

		"""Grow the pulse memory to cover ``lg``; invalid values leave it untouched."""

		safe_lg = _valid_lg(lg)

		if safe_lg is not None:
			self.memory.ensure(safe_lg)


	def get_current_selection (self) -> Selection:

		"""Return a copy of the selected integers (ascending) and the stored fractions."""

		return Selection(
			integers=self.memory.selected(),
			fractions=[dataclasses.replace(entry) for entry in self.fractions.selection_state.values()]
		)


	def clear_all (self, lg: typing.Any = None) -> None:

		"""
		Deselect everything.

		Integer pulses ``1 .. lg-1`` are only cleared for a valid ``lg``, but
		the fraction store is emptied regardless.
		"""

		safe_lg = _valid_lg(lg)

		if safe_lg is not None:

			self.memory.ensure(safe_lg)

			for index in range(1, math.ceil(safe_lg)):
				self.memory.data[index] = False

		self.fractions.clear()

		logger.debug("Cleared pulse selection")
