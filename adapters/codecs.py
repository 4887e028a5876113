"""
CSV and JSON import/export of reading history.

Export writes the camelCase boundary shape. Import returns raw reading
mappings; they still have to go through enrichment, so derived fields
are never trusted from a file.

CSV layout (one reading per row):

    timestamp,systolic,diastolic,heartRate,posture,symptoms,medications,note

Symptoms are joined with ``;`` and medications are ``name;dose;administeredAt``
entries joined with ``|``. The older ``ts,sbp,dbp,hr,posture,symptoms,meds,note``
header is accepted on import.
"""

import csv
import io
import json
from collections.abc import Sequence
from typing import Any

from core.domain.models import EnrichedReading, Medication, Reading

CSV_FIELDS = [
    "timestamp",
    "systolic",
    "diastolic",
    "heartRate",
    "posture",
    "symptoms",
    "medications",
    "note",
]

LEGACY_HEADERS = {
    "ts": "timestamp",
    "sbp": "systolic",
    "dbp": "diastolic",
    "hr": "heartRate",
    "meds": "medications",
}

TAG_SEPARATOR = ";"
MEDICATION_SEPARATOR = "|"
RESERVED = (TAG_SEPARATOR, MEDICATION_SEPARATOR)


class CodecError(ValueError):
    """Raised when a history file cannot be encoded or decoded."""


def _check_reserved(value: str, what: str) -> str:
    if any(sep in value for sep in RESERVED):
        raise CodecError(f"{what} {value!r} contains a reserved separator ';' or '|'")
    return value


def _encode_medication(med: Medication) -> str:
    at = med.administered_at.isoformat() if med.administered_at else ""
    return TAG_SEPARATOR.join(
        [_check_reserved(med.name, "medication name"), _check_reserved(med.dose, "dose"), at]
    )


def _decode_medications(cell: str) -> list[dict[str, str]]:
    meds = []
    for part in filter(None, cell.split(MEDICATION_SEPARATOR)):
        name, dose, at = (part.split(TAG_SEPARATOR) + ["", ""])[:3]
        meds.append({"name": name, "dose": dose, "administeredAt": at})
    return meds


def to_csv(history: Sequence[Reading]) -> str:
    """Encode readings as CSV. Derived fields are not exported."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS, lineterminator="\n")
    writer.writeheader()

    for rec in history:
        writer.writerow(
            {
                "timestamp": rec.timestamp.isoformat(),
                "systolic": rec.systolic,
                "diastolic": rec.diastolic,
                "heartRate": rec.heart_rate if rec.heart_rate is not None else "",
                "posture": rec.posture.value,
                "symptoms": TAG_SEPARATOR.join(
                    _check_reserved(tag, "symptom") for tag in rec.symptoms
                ),
                "medications": MEDICATION_SEPARATOR.join(
                    _encode_medication(med) for med in rec.medications
                ),
                "note": rec.note,
            }
        )
    return output.getvalue()


def from_csv(text: str) -> list[dict[str, Any]]:
    """Decode CSV text into raw reading mappings, in file order."""
    rows = [row for row in csv.reader(io.StringIO(text)) if any(c.strip() for c in row)]
    if not rows:
        return []

    header = [LEGACY_HEADERS.get(h.strip(), h.strip()) for h in rows[0]]
    missing = {"timestamp", "systolic", "diastolic"} - set(header)
    if missing:
        raise CodecError(f"CSV header is missing required columns: {sorted(missing)}")

    records = []
    for cols in rows[1:]:
        obj: dict[str, Any] = dict(zip(header, cols))
        obj["symptoms"] = [t for t in obj.get("symptoms", "").split(TAG_SEPARATOR) if t]
        obj["medications"] = _decode_medications(obj.get("medications", ""))
        records.append(obj)
    return records


def to_json(history: Sequence[EnrichedReading]) -> str:
    """Encode enriched readings, derived fields included."""
    payload = [rec.model_dump(mode="json", by_alias=True) for rec in history]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def from_json(text: str) -> list[dict[str, Any]]:
    """Decode a JSON array of readings into raw mappings."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise CodecError(f"Invalid JSON: {e}") from e
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise CodecError("JSON history must be an array of reading objects")
    return payload
