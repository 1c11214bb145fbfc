"""Constants for pulseline.

- ``pulseline.constants.durations`` - Notation duration codes used by the event builder
"""
