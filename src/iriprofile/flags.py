"""The IRI model switch vector.

IRI reads 50 logical switches (``JF(1:50)``) that select sub-models, input
sources and diagnostics.  :class:`FlagVector` stores them as booleans,
addressed either by their 1-based IRI position or by the snake_case names
in :data:`FLAGS`.  Position 0 does not exist: the 1-based numbering is the
one used in the IRI documentation and is kept as is.

Typical usage::

    from iriprofile.flags import FlagVector
    flags = FlagVector.default_profile()
    flags = flags.with_flag("ion_drift", True)
    flags[21]  # True
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import NamedTuple

import numpy as np

from iriprofile.constants import NUM_FLAGS
from iriprofile.errors import InvalidFlagIndex


class FlagSpec(NamedTuple):
    """Description of one IRI switch.

    Attributes:
        index: 1-based position in the ``JF`` vector.
        name: Identifier used for lookups.
        on: Behaviour selected when the switch is true.
        off: Behaviour selected when the switch is false.
    """

    index: int
    name: str
    on: str
    off: str


_SPECS: tuple[tuple[str, str, str], ...] = (
    ("ne_computed", "Ne computed", "Ne not computed"),
    ("te_ti_computed", "Te, Ti computed", "Te, Ti not computed"),
    ("ni_computed", "Ne & Ni computed", "Ni not computed"),
    ("b0_b1_bil2000", "B0, B1 Bil-2000", "B0, B1 other models (see switch 31)"),
    ("fof2_ccir", "foF2 CCIR", "foF2 URSI"),
    ("ni_danilov_yaichnikov", "Ni DS-1995 & DY-1985", "Ni RBV-10 & TBT-15"),
    ("ne_topside_f107_limit", "Ne topside F10.7 < 188", "Ne topside F10.7 unlimited"),
    ("fof2_model", "foF2 from model", "foF2 user input"),
    ("hmf2_model", "hmF2 from model", "hmF2 user input"),
    ("te_standard", "Te standard", "Te using Te/Ne correlation"),
    ("ne_standard_profile", "Ne standard profile", "Ne Lay-function formalism"),
    ("messages_to_stdout", "Messages to unit 6", "Messages to messages.txt"),
    ("fof1_model", "foF1 from model", "foF1 user input"),
    ("hmf1_model", "hmF1 from model", "hmF1 user input"),
    ("foe_model", "foE from model", "foE user input"),
    ("hme_model", "hmE from model", "hmE user input"),
    ("rz12_from_file", "Rz12 from file", "Rz12 user input"),
    ("igrf_dip", "IGRF dip, magbr, modip", "old FIELDG"),
    ("f1_probability_model", "F1 probability model", "F1 standard"),
    ("f1_standard", "standard F1", "standard F1 plus L condition"),
    ("ion_drift", "ion drift computed", "ion drift not computed"),
    ("ion_densities_percent", "ion densities in %", "ion densities in m^-3"),
    ("te_topside_bilitza", "Te topside Bil-1985", "Te topside TBT-2012"),
    ("d_region_iri1990", "D-region IRI-1990", "D-region FT-2001 and DRS-1995"),
    ("f107d_from_file", "F10.7 daily from APF107.DAT", "F10.7 daily user input"),
    ("fof2_storm", "foF2 storm model", "no storm updating"),
    ("ig12_from_file", "IG12 from file", "IG12 user input"),
    ("spread_f_probability", "spread-F probability computed", "spread-F not computed"),
    ("topside_iri2001", "IRI-2001 topside", "topside options of switch 30"),
    ("topside_iri2001_corrected", "IRI-2001 topside corrected", "NeQuick topside"),
    ("b0_b1_abt2009", "B0, B1 ABT-2009", "B0 Gulyaeva-1987 h0.5"),
    ("f107_81_from_file", "F10.7_81 from file", "F10.7_81 user input"),
    ("auroral_boundary", "auroral boundary model on", "auroral boundary model off"),
    ("messages_on", "messages on", "messages off"),
    ("foe_storm", "foE storm model on", "foE storm model off"),
    ("hmf2_without_storm", "hmF2 without foF2 storm", "hmF2 with foF2 storm"),
    ("topside_without_storm", "topside without foF2 storm", "topside with foF2 storm"),
    ("iriflip_writes_off", "WRITEs off in IRIFLIP", "WRITEs on in IRIFLIP"),
    ("hmf2_m3000f2", "hmF2 from M3000F2", "hmF2 new models (switch 40)"),
    ("hmf2_amtb", "hmF2 AMTB model", "hmF2 Shubin-COSMIC model"),
    ("cov_f107_365", "COV = F10.7_365", "COV = f(IG12)"),
    ("te_f107_dependence", "Te with PF10.7 dependence", "Te without PF10.7 dependence"),
    ("b0_model", "B0 from model", "B0 user input"),
    ("b1_model", "B1 from model", "B1 user input"),
    ("hnea_default", "HNEA 65/80 km day/night", "HNEA user input"),
    ("hnee_default", "HNEE 2000 km", "HNEE user input"),
    ("cgm_coordinates", "CGM computation on", "CGM computation off"),
    ("ti_truhlik2021", "Ti Tru-2021", "Ti Bil-1981"),
    ("reserved_49", "reserved", "reserved"),
    ("reserved_50", "reserved", "reserved"),
)

FLAGS: tuple[FlagSpec, ...] = tuple(
    FlagSpec(i + 1, name, on, off) for i, (name, on, off) in enumerate(_SPECS)
)
"""All switches in ``JF`` order; ``FLAGS[k - 1].index == k``."""

_INDEX_BY_NAME: dict[str, int] = {spec.name: spec.index for spec in FLAGS}

DEFAULT_OFF: tuple[str, ...] = (
    "b0_b1_bil2000",
    "fof2_ccir",
    "ni_danilov_yaichnikov",
    "ion_drift",
    "te_topside_bilitza",
    "spread_f_probability",
    "topside_iri2001",
    "topside_iri2001_corrected",
    "auroral_boundary",
    "foe_storm",
    "hmf2_m3000f2",
    "hmf2_amtb",
    "cgm_coordinates",
)
"""Switches forced off in the standard IRI default profile; all others are on."""


def flag_index(key: int | str) -> int:
    """Resolve a switch name or 1-based position to its 1-based position.

    Args:
        key: Switch name from :data:`FLAGS` or an integer in ``1..50``.

    Returns:
        The 1-based switch position.

    Raises:
        InvalidFlagIndex: If *key* is out of range or not a known name.
    """
    if isinstance(key, str):
        try:
            return _INDEX_BY_NAME[key]
        except KeyError:
            raise InvalidFlagIndex(f"Unknown switch name '{key}'") from None
    if isinstance(key, bool) or not isinstance(key, (int, np.integer)):
        raise InvalidFlagIndex(f"Switch key must be a name or an integer, got {key!r}")
    if not 1 <= key <= NUM_FLAGS:
        raise InvalidFlagIndex(f"Switch index must be in 1..{NUM_FLAGS}, got {key}")
    return int(key)


class FlagVector:
    """Ordered set of the 50 IRI model switches.

    A FlagVector is an immutable value: :meth:`with_flag` returns a new
    vector and leaves the original untouched, so a vector stored in a
    :class:`~iriprofile.request.ModelRequest` cannot change after
    validation.

    Args:
        values: Exactly 50 truthy/falsy values for switches 1..50.  When
            omitted, every switch is on.

    Raises:
        ValueError: If *values* does not contain exactly 50 entries.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[bool] | None = None) -> None:
        if values is None:
            values = (True,) * NUM_FLAGS
        values = tuple(bool(v) for v in values)
        if len(values) != NUM_FLAGS:
            raise ValueError(f"A switch vector holds exactly {NUM_FLAGS} values, got {len(values)}")
        object.__setattr__(self, "_values", values)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable; use with_flag()")

    @classmethod
    def default_profile(cls) -> FlagVector:
        """Return the standard IRI profile: all on except :data:`DEFAULT_OFF`.

        Returns:
            A new FlagVector.
        """
        return cls().with_flags({name: False for name in DEFAULT_OFF})

    def apply_default_profile(self) -> FlagVector:
        """Return the standard profile, discarding any changes made to this vector.

        Applying it any number of times gives the same vector.
        """
        return self.default_profile()

    def get(self, key: int | str) -> bool:
        """Return the state of a switch by name or 1-based position."""
        return self._values[flag_index(key) - 1]

    def __getitem__(self, key: int | str) -> bool:
        return self.get(key)

    def with_flag(self, key: int | str, value: bool) -> FlagVector:
        """Return a copy with one switch set.

        Args:
            key: Switch name or 1-based position.
            value: New state of the switch.

        Returns:
            A new FlagVector.

        Raises:
            InvalidFlagIndex: If *key* is out of range or not a known name.
        """
        return self.with_flags({key: value})

    def with_flags(self, changes: Mapping[int | str, bool]) -> FlagVector:
        """Return a copy with several switches set at once.

        Args:
            changes: Switch name or 1-based position mapped to its new state.

        Returns:
            A new FlagVector.
        """
        values = list(self._values)
        for key, value in changes.items():
            values[flag_index(key) - 1] = bool(value)
        return FlagVector(values)

    def enabled(self) -> tuple[int, ...]:
        """Return the 1-based positions of all switches that are on."""
        return tuple(i + 1 for i, v in enumerate(self._values) if v)

    def disabled(self) -> tuple[int, ...]:
        """Return the 1-based positions of all switches that are off."""
        return tuple(i + 1 for i, v in enumerate(self._values) if not v)

    def to_native(self) -> np.ndarray:
        """Return the vector in the layout ``IRI_SUB`` reads.

        Element ``k - 1`` of the result is switch ``k``; the array is
        passed to Fortran as ``JF(1)``, so nothing is shifted or dropped.

        Returns:
            Contiguous ``int32`` array of shape ``(50,)`` holding 1/0.
        """
        return np.array(self._values, dtype=np.int32)

    def to_list(self) -> list[bool]:
        return list(self._values)

    def __iter__(self) -> Iterator[bool]:
        return iter(self._values)

    def __len__(self) -> int:
        return NUM_FLAGS

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlagVector):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"FlagVector(off={list(self.disabled())})"
