"""
The `constants` module defines the fixed shapes, sentinels, and unit factors of the IRI call boundary.
"""

# Switch vector

"""
Number of model switches in the IRI ``JF`` vector. Switches are addressed 1..NUM_FLAGS.
"""
NUM_FLAGS = 50

# Output buffers

"""
Maximum number of height steps the ``OUTF`` buffer can hold.
"""
MAX_HEIGHT_ROWS = 1000

"""
Number of parameters stored per height step in ``OUTF``.
"""
NUM_PROFILE_PARAMETERS = 20

"""
Number of slots in the ``OARR`` scalar buffer.
"""
NUM_SCALARS = 100

"""
Value every ``OARR`` slot holds before the call. IRI reads it as "not provided" on
slots that double as optional inputs.
"""
SCALAR_SENTINEL = -1.0

# Units

"""
Factor converting number densities from m^-3 to cm^-3. Units: *m^-3 per cm^-3*
"""
M3_PER_CM3 = 1.0e6

# Time

"""
Offset added to a decimal hour to mark it as universal time rather than local time. Units: *h*
"""
UT_HOUR_OFFSET = 25.0

"""
Upper bound of a decimal hour, local or universal before the offset. Units: *h*
"""
HOURS_PER_DAY = 24.0
