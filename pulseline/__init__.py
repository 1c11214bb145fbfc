"""
pulseline - the pulse timing and notation core for rhythm and ear-training apps.

A timeline is ``Lg`` pulses long. Pulse ``Lg`` is the end marker of the
cycle, never a playable pulse. Users select accent pulses (and fractional
positions between them), and an optional fraction ``n/d`` groups the pulses
into tuplets. pulseline turns that state into two things a host needs:

- **When to play.** ``compute_next_zero()`` finds the next cycle boundary on
  an audio clock, honouring look-ahead; ``compute_resync_delay()`` tells a
  tap-tempo control how long to wait for the next downbeat.
- **What to draw.** ``build_pulse_events()`` produces the ordered notes and
  rests for a notation renderer, writing out tuplet group boundaries and
  forcing trailing remainder pulses to quarter notes.

``PulseSeqState`` holds the selection itself and renders it as the canonical
field text (``"  1  3  2.2  "``) for round-trip editing.

Everything is pure and synchronous: no I/O, no threads, no audio engine.

Minimal example:

    ```python
    import pulseline

    state = pulseline.PulseSeqState()
    state.apply_validated_tokens([1, 3, 5], [], lg=8)

    events = pulseline.build_pulse_events(lg=8, selected=state.get_current_selection().integers)
    info = pulseline.compute_next_zero(now=1.25, period=2.0, look_ahead=0.5)
    ```

Package-level exports: ``PulseSeqState``, ``build_pulse_events``,
``compute_next_zero``, ``compute_resync_delay``.
"""

import pulseline.notation
import pulseline.pulse_state
import pulseline.scheduler


PulseSeqState = pulseline.pulse_state.PulseSeqState
build_pulse_events = pulseline.notation.build_pulse_events
compute_next_zero = pulseline.scheduler.compute_next_zero
compute_resync_delay = pulseline.scheduler.compute_resync_delay
