"""Static taxonomy tables.

Every table maps a folded raw key (see fold_key) to a canonical display
name. Tables are built once at import into read-only MappingProxyType
views and never change afterwards, so they can be shared by any number of
concurrent requests without locking.

Taxonomy version: the experience level dimension has three buckets
(New Grad, Experienced, Leadership). "Entry Level" and "Senior" used to be
their own buckets and now fold into Experienced; callers must not assume
historical raw values map 1:1 onto current buckets.
"""

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from browse_stats.domain.models import Dimension

from .text import fold_key, slugify

# Rendered upper-case by the Title Case fallback regardless of position
CLINICAL_ACRONYMS = frozenset(
    {"icu", "nicu", "er", "or", "pacu", "pcu", "ccu", "cvicu", "micu", "sicu", "picu"}
)

SPECIALTIES: Tuple[str, ...] = (
    "Ambulatory",
    "Cardiac",
    "Case Management",
    "Cath Lab",
    "Clinical Documentation",
    "Correctional",
    "Dialysis",
    "Endoscopy",
    "ER",
    "Float Pool",
    "General Nursing",
    "Geriatrics",
    "Home Health",
    "Hospice",
    "ICU",
    "Infusion",
    "Labor & Delivery",
    "Maternity",
    "Med-Surg",
    "Mental Health",
    "Neurology",
    "NICU",
    "Nurse Educator",
    "Oncology",
    "OR",
    "PACU",
    "Pediatrics",
    "Quality Assurance",
    "Radiology",
    "Rehabilitation",
    "School",
    "Stepdown",
    "Telehealth",
    "Telemetry",
    "Transplant",
    "Utilization Review",
    "Wound Care",
)

SPECIALTY_ALIASES: Dict[str, str] = {
    # Legacy catch-all tags
    "all specialties": "General Nursing",
    "all specialty": "General Nursing",
    "general": "General Nursing",
    "inpatient": "General Nursing",
    "leadership": "General Nursing",
    "other": "General Nursing",
    "travel": "General Nursing",
    "travel nurse": "General Nursing",
    "travel nursing": "General Nursing",
    # Labor & Delivery
    "l&d": "Labor & Delivery",
    "l & d": "Labor & Delivery",
    "l and d": "Labor & Delivery",
    "labor and delivery": "Labor & Delivery",
    "labor delivery": "Labor & Delivery",
    "ob/gyn": "Labor & Delivery",
    "obgyn": "Labor & Delivery",
    "obstetrics": "Labor & Delivery",
    "reproductive": "Labor & Delivery",
    "women's services": "Labor & Delivery",
    # Mental Health
    "psychiatric": "Mental Health",
    "psych": "Mental Health",
    "psychiatry": "Mental Health",
    "behavioral health": "Mental Health",
    "rehab": "Rehabilitation",
    # ER
    "ed": "ER",
    "emergency": "ER",
    "emergency department": "ER",
    "emergency room": "ER",
    "triage": "ER",
    # Neurology
    "neuro": "Neurology",
    "neuroscience": "Neurology",
    "neuro science": "Neurology",
    "neurosurgery": "Neurology",
    # Cardiac
    "cardiac care": "Cardiac",
    "cardiovascular": "Cardiac",
    "cardiology": "Cardiac",
    "cardiac surgery": "Cardiac",
    "cv": "Cardiac",
    # ICU
    "critical care": "ICU",
    "intensive care": "ICU",
    "ccu": "ICU",
    "micu": "ICU",
    "sicu": "ICU",
    "picu": "ICU",
    "cardiac icu": "ICU",
    # OR
    "operating room": "OR",
    "surgery": "OR",
    "surgical": "OR",
    "perioperative": "OR",
    "or/perioperative": "OR",
    "crna": "OR",
    # Med-Surg
    "medsurg": "Med-Surg",
    "med/surg": "Med-Surg",
    "medical surgical": "Med-Surg",
    "orthopedics": "Med-Surg",
    "orthopedic": "Med-Surg",
    "ortho": "Med-Surg",
    # PACU
    "post anesthesia": "PACU",
    "recovery room": "PACU",
    # Ambulatory
    "outpatient": "Ambulatory",
    "clinic": "Ambulatory",
    # Radiology
    "interventional radiology": "Radiology",
    "ir": "Radiology",
    # Geriatrics
    "geriatric": "Geriatrics",
    "elderly care": "Geriatrics",
    "long term care": "Geriatrics",
    "ltc": "Geriatrics",
    "skilled nursing": "Geriatrics",
    "snf": "Geriatrics",
    # Pediatrics
    "pediatric": "Pediatrics",
    "peds": "Pediatrics",
    # Oncology
    "cancer": "Oncology",
    "cancer care": "Oncology",
    "tele": "Telemetry",
    # Stepdown (progressive care is consolidated here)
    "pcu": "Stepdown",
    "progressive": "Stepdown",
    "progressive care": "Stepdown",
    "step down": "Stepdown",
    # Cath Lab
    "cath": "Cath Lab",
    "cardiac cath": "Cath Lab",
    "catheterization": "Cath Lab",
    # Case Management
    "case manager": "Case Management",
    "care management": "Case Management",
    "care coordination": "Case Management",
    # Home Health
    "home healthcare": "Home Health",
    "homecare": "Home Health",
    "home care": "Home Health",
    "home nursing": "Home Health",
    "visiting nurse": "Home Health",
    # School
    "school nurse": "School",
    "school nursing": "School",
    # Correctional
    "corrections": "Correctional",
    "prison": "Correctional",
    "jail": "Correctional",
    # Float Pool
    "float": "Float Pool",
    "floating": "Float Pool",
    "resource pool": "Float Pool",
    # Wound Care
    "wound": "Wound Care",
    "wound management": "Wound Care",
    "ostomy": "Wound Care",
    # Utilization Review
    "utilization management": "Utilization Review",
    "ur nurse": "Utilization Review",
    "um nurse": "Utilization Review",
    "prior authorization": "Utilization Review",
    "prior auth": "Utilization Review",
    "appeals nurse": "Utilization Review",
    "medical review": "Utilization Review",
    "concurrent review": "Utilization Review",
    # Telehealth
    "telemedicine": "Telehealth",
    "tele health": "Telehealth",
    "virtual care": "Telehealth",
    "remote triage": "Telehealth",
    "telephone triage": "Telehealth",
    "nurse line": "Telehealth",
    "advice nurse": "Telehealth",
    # Clinical Documentation
    "cdi": "Clinical Documentation",
    "cdi specialist": "Clinical Documentation",
    "clinical documentation improvement": "Clinical Documentation",
    "documentation specialist": "Clinical Documentation",
    "coding nurse": "Clinical Documentation",
    # Quality Assurance
    "qa nurse": "Quality Assurance",
    "quality improvement": "Quality Assurance",
    "qi nurse": "Quality Assurance",
    "quality coordinator": "Quality Assurance",
    "quality management": "Quality Assurance",
    "patient safety": "Quality Assurance",
    "risk management": "Quality Assurance",
    # Nurse Educator
    "education": "Nurse Educator",
    "clinical educator": "Nurse Educator",
    "staff development": "Nurse Educator",
    "nurse instructor": "Nurse Educator",
    "nursing instructor": "Nurse Educator",
    "education coordinator": "Nurse Educator",
    "clinical instructor": "Nurse Educator",
}

JOB_TYPES: Tuple[str, ...] = ("Contract", "Full Time", "Part Time", "Per Diem", "Travel")

JOB_TYPE_ALIASES: Dict[str, str] = {
    "fulltime": "Full Time",
    "parttime": "Part Time",
    "prn": "Per Diem",
    "perdiem": "Per Diem",
}

EXPERIENCE_LEVELS: Tuple[str, ...] = ("New Grad", "Experienced", "Leadership")

EXPERIENCE_LEVEL_ALIASES: Dict[str, str] = {
    "newgrad": "New Grad",
    "new graduate": "New Grad",
    "graduate nurse": "New Grad",
    "gn": "New Grad",
    "residency": "New Grad",
    # Entry Level and Senior were merged into Experienced
    "entry level": "Experienced",
    "entrylevel": "Experienced",
    "entry": "Experienced",
    "senior": "Experienced",
    "senior rn": "Experienced",
    "lead": "Leadership",
    "manager": "Leadership",
    "charge": "Leadership",
    "charge nurse": "Leadership",
    "director": "Leadership",
    "coordinator": "Leadership",
    "supervisor": "Leadership",
}

SHIFT_TYPES: Tuple[str, ...] = (
    "Day Shift",
    "Evening Shift",
    "Night Shift",
    "Rotating Shift",
    "Variable Shift",
)

SHIFT_TYPE_ALIASES: Dict[str, str] = {
    "day": "Day Shift",
    "days": "Day Shift",
    "evening": "Evening Shift",
    "evenings": "Evening Shift",
    "night": "Night Shift",
    "nights": "Night Shift",
    "rotating": "Rotating Shift",
    "variable": "Variable Shift",
}

STATE_NAMES: Mapping[str, str] = MappingProxyType({
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho",
    "IL": "Illinois", "IN": "Indiana", "IA": "Iowa", "KS": "Kansas",
    "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
    "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
    "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah",
    "VT": "Vermont", "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming", "DC": "District of Columbia",
})

STATE_CODES_BY_NAME: Mapping[str, str] = MappingProxyType(
    {name.lower(): code for code, name in STATE_NAMES.items()}
)


def build_synonym_table(
    dimension: Dimension, canonical_names: Iterable[str], aliases: Mapping[str, str]
) -> Mapping[str, str]:
    """Build a read-only synonym table for one dimension.

    Every canonical name maps to itself under its folded key, then aliases
    are folded and added. Alias keys are folded here so the tables above can
    be written in whatever spelling the classifier used.

    Raises:
        ValueError: If a key maps to two canonical names, an alias targets an
            unknown canonical name, or two canonical names share a slug
    """
    canonical_names = tuple(canonical_names)
    table: Dict[str, str] = {}

    seen_slugs: Dict[str, str] = {}
    for name in canonical_names:
        slug = slugify(name)
        if slug in seen_slugs:
            raise ValueError(
                f"{dimension.value}: canonical names '{seen_slugs[slug]}' and "
                f"'{name}' share slug '{slug}'"
            )
        seen_slugs[slug] = name
        table[fold_key(name)] = name

    for raw, canonical in aliases.items():
        if canonical not in canonical_names:
            raise ValueError(f"{dimension.value}: alias '{raw}' targets unknown value '{canonical}'")
        key = fold_key(raw)
        existing = table.get(key)
        if existing is not None and existing != canonical:
            raise ValueError(
                f"{dimension.value}: key '{key}' maps to both '{existing}' and '{canonical}'"
            )
        table[key] = canonical

    return MappingProxyType(table)


CANONICAL_VALUES: Mapping[Dimension, Tuple[str, ...]] = MappingProxyType({
    Dimension.SPECIALTY: SPECIALTIES,
    Dimension.JOB_TYPE: JOB_TYPES,
    Dimension.EXPERIENCE_LEVEL: EXPERIENCE_LEVELS,
    Dimension.SHIFT_TYPE: SHIFT_TYPES,
})

SYNONYM_TABLES: Mapping[Dimension, Mapping[str, str]] = MappingProxyType({
    Dimension.SPECIALTY: build_synonym_table(Dimension.SPECIALTY, SPECIALTIES, SPECIALTY_ALIASES),
    Dimension.JOB_TYPE: build_synonym_table(Dimension.JOB_TYPE, JOB_TYPES, JOB_TYPE_ALIASES),
    Dimension.EXPERIENCE_LEVEL: build_synonym_table(
        Dimension.EXPERIENCE_LEVEL, EXPERIENCE_LEVELS, EXPERIENCE_LEVEL_ALIASES
    ),
    Dimension.SHIFT_TYPE: build_synonym_table(
        Dimension.SHIFT_TYPE, SHIFT_TYPES, SHIFT_TYPE_ALIASES
    ),
})
