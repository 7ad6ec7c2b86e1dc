"""
/**
 * @file zip_state.py
 * @summary Static ZIP-prefix to state table used by the zip lookup fallback.
 *
 * @details
 * - Ranges of 3-digit ZIP prefixes (inclusive) per state; no network access.
 * - Single-prefix overrides take precedence over the ranges.
 */
"""

import re
from typing import Dict, List, Optional, Tuple

ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

# (first prefix, last prefix, state)
ZIP_PREFIX_RANGES: List[Tuple[int, int, str]] = [
    (5, 5, "NY"),
    (6, 9, "PR"),
    (10, 27, "MA"),
    (28, 29, "RI"),
    (30, 38, "NH"),
    (39, 49, "ME"),
    (50, 54, "VT"),
    (55, 55, "MA"),
    (56, 59, "VT"),
    (60, 69, "CT"),
    (70, 89, "NJ"),
    (100, 149, "NY"),
    (150, 196, "PA"),
    (197, 199, "DE"),
    (200, 205, "DC"),
    (206, 219, "MD"),
    (220, 246, "VA"),
    (247, 268, "WV"),
    (270, 289, "NC"),
    (290, 299, "SC"),
    (300, 319, "GA"),
    (320, 349, "FL"),
    (350, 369, "AL"),
    (370, 385, "TN"),
    (386, 397, "MS"),
    (398, 399, "GA"),
    (400, 427, "KY"),
    (430, 459, "OH"),
    (460, 479, "IN"),
    (480, 499, "MI"),
    (500, 528, "IA"),
    (530, 549, "WI"),
    (550, 567, "MN"),
    (569, 569, "DC"),
    (570, 577, "SD"),
    (580, 588, "ND"),
    (590, 599, "MT"),
    (600, 629, "IL"),
    (630, 658, "MO"),
    (660, 679, "KS"),
    (680, 693, "NE"),
    (700, 715, "LA"),
    (716, 729, "AR"),
    (730, 749, "OK"),
    (750, 799, "TX"),
    (800, 816, "CO"),
    (820, 831, "WY"),
    (832, 838, "ID"),
    (840, 847, "UT"),
    (850, 865, "AZ"),
    (870, 884, "NM"),
    (889, 898, "NV"),
    (900, 961, "CA"),
    (967, 968, "HI"),
    (969, 969, "GU"),
    (970, 979, "OR"),
    (980, 994, "WA"),
    (995, 999, "AK"),
]

ZIP_PREFIX_OVERRIDES: Dict[int, str] = {
    733: "TX",
    885: "TX",
}


def resolve_state(zip_code: str) -> Optional[str]:
    """
    /**
     * Resolve a ZIP (or ZIP+4) code to a two-letter state code.
     *
     * @return State code, or None for malformed or unassigned prefixes.
     */
    """
    if not zip_code or not ZIP_PATTERN.match(zip_code.strip()):
        return None
    prefix = int(zip_code.strip()[:3])
    if prefix in ZIP_PREFIX_OVERRIDES:
        return ZIP_PREFIX_OVERRIDES[prefix]
    for low, high, state in ZIP_PREFIX_RANGES:
        if low <= prefix <= high:
            return state
    return None
