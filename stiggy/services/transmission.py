"""Per-track transmission ratios and track-name autocomplete.

Ratios are fixed reference data, not derived from car inputs. Lookup is an
exact match on the trimmed, lowercased track name; fuzzy matching only
exists in ``suggest_tracks`` for building autocomplete choices.
"""

from types import MappingProxyType
from typing import Mapping

from stiggy.core.enums import MAX_AUTOCOMPLETE_CHOICES, ErrorKind
from stiggy.models.tune import GEAR_NAMES, CalculationError, TransmissionTune

# =============================================================================
# REFERENCE DATA
# =============================================================================

# Gear sets shared across tracks, 1st..6th
_MEDIUM = (3.800, 2.600, 1.900, 1.400, 1.100, 0.900)
_TECHNICAL = (4.000, 2.800, 2.000, 1.500, 1.200, 0.950)
_FLOWING = (3.900, 2.700, 1.950, 1.450, 1.150, 0.850)
_ROLLING = (3.700, 2.500, 1.850, 1.350, 1.050, 0.850)
_SHORT = (4.200, 2.900, 2.100, 1.600, 1.300, 1.000)
_TIGHT = (4.300, 3.000, 2.200, 1.700, 1.400, 1.100)

# track name (lowercase) -> (final drive, gear set)
_RATIOS: dict[str, tuple[float, tuple[float, ...]]] = {
    "24 heures du mans racing circuit": (2.800, _MEDIUM),
    "alsace": (3.500, _TECHNICAL),
    "autodrome lago maggiore": (3.200, _FLOWING),
    "autódromo de interlagos": (3.400, _ROLLING),
    "autodromo nazionale monza": (3.000, _MEDIUM),
    "autopolis international racing course": (3.300, _MEDIUM),
    "blue moon bay speedway": (3.600, _SHORT),
    "brands hatch": (3.700, _SHORT),
    "broad bean raceway": (3.500, _TECHNICAL),
    "circuit de barcelona-catalunya": (3.200, _FLOWING),
    "circuit de sainte-croix": (3.400, _ROLLING),
    "circuit de spa-francorchamps": (3.100, _MEDIUM),
    "colorado springs": (3.500, _TECHNICAL),
    "daytona international speedway": (2.900, _MEDIUM),
    "deep forest raceway": (3.400, _ROLLING),
    "dragon trail": (3.600, _SHORT),
    "eiger nordwand": (3.800, _TIGHT),
    "fisherman’s ranch": (3.500, _TECHNICAL),
    "fuji international speedway": (3.100, _MEDIUM),
    "goodwood motor circuit": (3.800, _TIGHT),
    "grand valley": (3.400, _ROLLING),
    "high speed ring": (3.000, _MEDIUM),
    "kyoto driving park": (4.000, (4.500, 3.100, 2.300, 1.800, 1.500, 1.200)),
    "lake louise": (3.600, _SHORT),
    "michelin raceway road atlanta": (3.300, _MEDIUM),
    "mount panorama circuit": (3.500, _TECHNICAL),
    "northern isle speedway": (3.700, _SHORT),
    "nürburgring": (3.200, _FLOWING),
    "red bull ring": (3.300, _MEDIUM),
    "sardegna - road track": (3.400, _ROLLING),
    "sardegna - windmills": (3.500, _TECHNICAL),
    "special stage route x": (2.800, _MEDIUM),
    "suzuka circuit": (3.100, _MEDIUM),
    "tokyo expressway": (3.000, _MEDIUM),
    "trial mountain circuit": (3.600, _SHORT),
    "tsukuba circuit": (4.200, (4.800, 3.300, 2.400, 1.900, 1.600, 1.300)),
    "watkins glen international": (3.300, _MEDIUM),
    "weathertech raceway laguna seca": (3.500, _TECHNICAL),
    "willow springs international raceway": (3.400, _ROLLING),
}

TRANSMISSION_TUNES: Mapping[str, TransmissionTune] = MappingProxyType(
    {
        track: TransmissionTune(
            final_drive=final_drive,
            gears=dict(zip(GEAR_NAMES, gears)),
        )
        for track, (final_drive, gears) in _RATIOS.items()
    }
)

TRACK_NAMES: tuple[str, ...] = tuple(TRANSMISSION_TUNES)


def normalize_track_name(track: str) -> str:
    return track.strip().lower()


def format_track_name(track: str) -> str:
    """Capitalize the first letter of each space-separated word.

    Only the first character changes, so hyphenated names keep their casing:
    "circuit de spa-francorchamps" -> "Circuit De Spa-francorchamps".
    """
    return " ".join(word[:1].upper() + word[1:] for word in track.split(" "))


def lookup_transmission_tune(track: str) -> TransmissionTune | CalculationError:
    """Look up the gear ratios for a track.

    Returns:
        TransmissionTune, or a NOT_FOUND CalculationError carrying every
        valid track name
    """
    tune = TRANSMISSION_TUNES.get(normalize_track_name(track))
    if tune is None:
        return CalculationError(
            kind=ErrorKind.NOT_FOUND,
            message=f'No transmission data for "{track}"',
            available=TRACK_NAMES,
        )
    return tune


def suggest_tracks(
    query: str,
    names: tuple[str, ...] = TRACK_NAMES,
    limit: int = MAX_AUTOCOMPLETE_CHOICES,
) -> list[tuple[str, str]]:
    """Rank track names for autocomplete.

    Names containing the query survive; starts-with matches rank before
    contains-only matches, then shorter names first. Ties keep table order.

    Returns:
        Up to ``limit`` (label, value) pairs where value is the canonical
        lowercase name
    """
    needle = normalize_track_name(query)
    matches = [name for name in names if needle in name]
    matches.sort(key=lambda name: (not name.startswith(needle), len(name)))
    return [(format_track_name(name), name) for name in matches[:limit]]
