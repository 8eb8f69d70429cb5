"""Baseband modem building blocks for amateur radio: AX.25 AFSK, CW identification, DMR direct-mode transmit and calibration helpers."""

__version__ = "0.1.0"