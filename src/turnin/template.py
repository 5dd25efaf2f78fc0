from __future__ import annotations

import logging
import uuid
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from . import DOCUMENT_TITLE
from .fields import MATERIAL_FIELDS, STRUCTURES, WORK_ITEMS, work_item_field
from .normalizer import CanonicalRecord

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
TEMPLATE_NAME = "turn_in.html.j2"
LOGO_URL = "https://gatesroof.com/public/uploads/1712815927.png"

env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _structure_rows(record: CanonicalRecord) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for structure in STRUCTURES:
        checked = [bool(record.get(work_item_field(structure, item), False)) for item in WORK_ITEMS]
        rows.append({"structure": structure, "items": checked})
    return rows


def render_html(
    record: CanonicalRecord,
    *,
    generated_at: datetime | None = None,
    document_id: str | None = None,
) -> str:
    logger.debug("Rendering template with fields: %s", sorted(record.as_dict()))
    now = generated_at or datetime.now()
    template = env.get_template(TEMPLATE_NAME)
    return template.render(
        title=DOCUMENT_TITLE,
        logo_url=LOGO_URL,
        record=record,
        materials=[(spec.name, record.get(spec.name)) for spec in MATERIAL_FIELDS],
        work_items=WORK_ITEMS,
        structure_rows=_structure_rows(record),
        document_id=document_id or str(uuid.uuid4()),
        generated_date=now.strftime("%m/%d/%Y"),
        generated_at=now.strftime("%m/%d/%Y, %I:%M:%S %p"),
    )
