from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FieldKind(str, Enum):
    TEXT = "text"
    NAME = "name"
    ADDRESS = "address"
    FLAG = "flag"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    candidates: tuple[str, ...]
    default: str | bool = ""
    kind: FieldKind = FieldKind.TEXT
    first_name_field: str | None = None
    last_name_field: str | None = None


STRUCTURES: tuple[str, ...] = ("House", "Shed", "Garage")
WORK_ITEMS: tuple[str, ...] = ("Roof", "Gutters", "Windows", "Paint")


def work_item_field(structure: str, item: str) -> str:
    return f"{structure} {item}"


def _work_item_specs() -> tuple[FieldSpec, ...]:
    specs: list[FieldSpec] = []
    for structure in STRUCTURES:
        for item in WORK_ITEMS:
            specs.append(
                FieldSpec(
                    name=work_item_field(structure, item),
                    candidates=(
                        f"Structures to be worked on >> {structure} >> {item}",
                        f"{structure.lower()}{item}",
                    ),
                    default=False,
                    kind=FieldKind.FLAG,
                )
            )
    return tuple(specs)


CONTACT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        name="Project Manager",
        candidates=(
            "projectManager",
            "{projectManager}",
            "q135_projectManager",
            "Project Manager",
            "PM Name",
        ),
        default="Project Manager",
        kind=FieldKind.NAME,
        first_name_field="Project Manager First Name",
        last_name_field="Project Manager Last Name",
    ),
    FieldSpec(
        name="PM Email",
        candidates=("pmEmail", "{pmEmail}", "PM Email", "Project Manager Email"),
    ),
    FieldSpec(
        name="Homeowner Name",
        candidates=("Homeowner Name", "homeownerName", "homeowner"),
        default="Homeowner",
        kind=FieldKind.NAME,
        first_name_field="Homeowner First Name",
        last_name_field="Homeowner Last Name",
    ),
    FieldSpec(
        name="Homeowner Phone Number",
        candidates=("Homeowner Phone Number", "homeownerPhoneNumber", "phone"),
    ),
    FieldSpec(
        name="Homeowner Email",
        candidates=(
            "Homeowner Email (PLEASE INCLUDE THIS)",
            "Homeowner Email",
            "homeownerEmail",
            "email",
        ),
    ),
    FieldSpec(
        name="Project Address",
        candidates=("Project Address", "projectAddress", "address"),
        kind=FieldKind.ADDRESS,
    ),
)

MATERIAL_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="Brand of Shingle", candidates=("What brand of shingle?", "brandOfShingle")),
    FieldSpec(name="Type of Shingle", candidates=("What type of shingle?", "typeOfShingle")),
    FieldSpec(
        name="Shingle Color",
        candidates=("What color (must be actual color)", "shingleColor"),
    ),
    FieldSpec(name="Drip Edge Color", candidates=("Drip edge color (circle)", "dripEdgeColor")),
    FieldSpec(name="Ridge Type", candidates=("Ridge Type (circle)", "ridgeType")),
    FieldSpec(
        name="Roof Materials to Replace",
        candidates=("What roof materials are we replacing?", "roofMaterials"),
    ),
)

WORK_ITEM_FIELDS: tuple[FieldSpec, ...] = _work_item_specs()

NOTE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(
        name="Special Instructions",
        candidates=("Special instructions/notes/side deals", "specialInstructions"),
    ),
    FieldSpec(
        name="Build Notes",
        candidates=("Put any other important build notes here", "buildNotes"),
    ),
    FieldSpec(name="Status", candidates=("Status", "status")),
)

FIELD_TABLE: tuple[FieldSpec, ...] = (
    CONTACT_FIELDS + MATERIAL_FIELDS + WORK_ITEM_FIELDS + NOTE_FIELDS
)

FIELDS_BY_NAME: dict[str, FieldSpec] = {spec.name: spec for spec in FIELD_TABLE}


def derived_field_names() -> tuple[str, ...]:
    names: list[str] = []
    for spec in FIELD_TABLE:
        if spec.first_name_field:
            names.append(spec.first_name_field)
        if spec.last_name_field:
            names.append(spec.last_name_field)
    return tuple(names)
