"""Frames for the 128x40 OLED screen of SteelSeries Apex keyboards, shown in a simulator."""

__version__ = "0.1.0"