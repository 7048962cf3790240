"""Unit conversions between natural units (GeV) and laboratory units.

Cross sections are carried in natural units (GeV^-2) throughout the package.
Multiply by a unit to convert *into* natural units and divide to convert out:

    xsec_cm2 = xsec / units.cm2
    xsec_natural = 1.5e-38 * units.cm2

Import Policy:
    from nuphase.core import units
"""

# hbar * c [GeV * fm]
HBARC = 0.1973269804

# Length
fm = 1.0 / HBARC          # GeV^-1
cm = 1.0e13 * fm
m = 1.0e2 * cm

# Area
fm2 = fm * fm
cm2 = cm * cm
mb = 0.1 * fm2            # millibarn
nb = 1.0e-6 * mb
pb = 1.0e-9 * mb

# Cross-section unit used by integration internals
XSEC_UNIT_1E38_CM2 = 1.0e-38 * cm2
