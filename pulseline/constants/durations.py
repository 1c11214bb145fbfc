"""Duration codes for notation events.

Codes follow the short forms most engraving libraries accept, so events can be
handed to a renderer without translation::

    import pulseline.constants.durations as dur

    event.duration == dur.QUARTER      # "q"
    event.duration == dur.SIXTEENTH    # "16"

``DEFAULT`` is the figure used when no valid duration or denominator is given.
"""

WHOLE = "w"
HALF = "h"
QUARTER = "q"
EIGHTH = "8"
SIXTEENTH = "16"
THIRTY_SECOND = "32"
SIXTY_FOURTH = "64"

DEFAULT = EIGHTH

# Exact codes for power-of-two denominators.
BY_DENOMINATOR = {
	1: WHOLE,
	2: HALF,
	4: QUARTER,
	8: EIGHTH,
	16: SIXTEENTH,
	32: THIRTY_SECOND,
	64: SIXTY_FOURTH,
}

# Remainder pulses past the last complete subdivision cycle always use this.
REMAINDER = QUARTER
