"""
VIN utilities - check digit validation and model year decoding.

Both public functions are total: any input yields a defined value
(False / "Unknown Year") instead of raising. The lookup tables are
module constants and never mutated.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

VIN_LENGTH = 17
CHECK_DIGIT_INDEX = 8
MODEL_YEAR_INDEX = 9
UNKNOWN_YEAR = "Unknown Year"

TRANSLITERATION = MappingProxyType({
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
    "0": 0, "1": 1, "2": 2, "3": 3, "4": 4, "5": 5, "6": 6, "7": 7, "8": 8, "9": 9,
})

WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

# 10th character -> model year, 2001-2030 only (no 30-year cycle disambiguation)
VIN_YEAR_MAP = MappingProxyType({
    "1": "2001", "2": "2002", "3": "2003", "4": "2004", "5": "2005",
    "6": "2006", "7": "2007", "8": "2008", "9": "2009",
    "A": "2010", "B": "2011", "C": "2012", "D": "2013", "E": "2014",
    "F": "2015", "G": "2016", "H": "2017", "J": "2018", "K": "2019",
    "L": "2020", "M": "2021", "N": "2022", "P": "2023", "R": "2024",
    "S": "2025", "T": "2026", "V": "2027", "W": "2028", "X": "2029",
    "Y": "2030",
})


@dataclass(frozen=True)
class VinSections:
    """Positional breakdown of a 17-character VIN."""
    wmi: str
    vds: str
    check_digit: str
    model_year_code: str
    plant_code: str
    sequential_number: str


def normalize_vin(vin: Any) -> str:
    """Strip whitespace and upper-case; empty string for None."""
    return (vin or "").strip().upper()


def compute_check_digit(vin: str) -> str:
    """Compute the expected check digit for a 17-character VIN.

    Raises KeyError for characters outside the transliteration table.
    """
    total = sum(TRANSLITERATION[ch] * weight for ch, weight in zip(vin.upper(), WEIGHTS))
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def validate_vin(vin: Any) -> bool:
    """Validate a VIN against its check digit (position 9)."""
    if not isinstance(vin, str) or len(vin) != VIN_LENGTH or not vin.isascii():
        return False

    vin = vin.upper()
    if any(ch not in TRANSLITERATION for ch in vin):
        # I, O, Q and non-alphanumerics
        return False

    return vin[CHECK_DIGIT_INDEX] == compute_check_digit(vin)


def decode_model_year(vin: Any) -> str:
    """Decode the model year from the 10th character, or "Unknown Year"."""
    if not isinstance(vin, str) or len(vin) != VIN_LENGTH:
        return UNKNOWN_YEAR
    return VIN_YEAR_MAP.get(vin[MODEL_YEAR_INDEX].upper(), UNKNOWN_YEAR)


def split_vin(vin: str) -> VinSections:
    if len(vin) != VIN_LENGTH:
        raise ValueError(f"VIN must be exactly {VIN_LENGTH} characters long.")
    return VinSections(
        wmi=vin[0:3],
        vds=vin[3:8],
        check_digit=vin[8],
        model_year_code=vin[9],
        plant_code=vin[10],
        sequential_number=vin[11:17],
    )
