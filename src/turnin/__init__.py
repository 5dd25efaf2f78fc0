from __future__ import annotations

DOCUMENT_PREFIX = "Gates_TurnIn"
DOCUMENT_TITLE = "Gates Enterprises Turn In Document"
