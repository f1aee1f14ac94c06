"""PV sizing engine.

Pure, synchronous computation core: solar geometry, hourly energy balance
and electrical string configuration for rooftop photovoltaic systems.
"""

__version__ = "0.1.0"
