"""Field Buddy: HVAC field calculations (duct sizing, refrigerant diagnostics, takeoffs, reports)."""

__version__ = "0.3.0"
