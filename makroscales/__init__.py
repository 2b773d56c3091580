"""Bridge from a Linx TTO line controller and a weighing PLC to a CAB label printer."""

__version__ = "0.1.0"