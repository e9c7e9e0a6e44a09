"""
app/validators/record_builder.py

Builds canonical records from mapped report rows and rejects rows that miss
required fields.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping

from app.domain.affiliate_report import (
    REQUIRED_FIELDS,
    CanonicalField,
    ClickRecord,
    FieldKind,
    ReportType,
    RowValidationError,
    TransactionRecord,
)
from app.normalizers.value_normalizer import ValueNormalizer

TRANSACTION_FIELDS: tuple[CanonicalField, ...] = tuple(
    CanonicalField(item.name) for item in fields(TransactionRecord)
)
CLICK_FIELDS: tuple[CanonicalField, ...] = tuple(
    CanonicalField(item.name) for item in fields(ClickRecord)
)

MISSING_VALUE_MESSAGE = "Required value is missing."


class RecordBuilder:
    """
    Validates and parses mapped rows into typed records.
    """

    def __init__(self, normalizer: ValueNormalizer | None = None) -> None:
        self._normalizer = normalizer or ValueNormalizer()

    def build_transaction(
        self,
        *,
        mapped_row: Mapping[str, str | None],
        row_number: int,
    ) -> tuple[TransactionRecord | None, list[RowValidationError]]:
        """
        Build one transaction record. Valid only with a non-empty order_id and
        a parseable item_id.
        """

        values = self._normalize_fields(mapped_row, TRANSACTION_FIELDS)
        errors = _required_field_errors(
            ReportType.TRANSACTIONS,
            values=values,
            mapped_row=mapped_row,
            row_number=row_number,
        )
        if errors:
            return None, errors
        return TransactionRecord(**values), []

    def build_click(
        self,
        *,
        mapped_row: Mapping[str, str | None],
        row_number: int,
    ) -> tuple[ClickRecord | None, list[RowValidationError]]:
        """
        Build one click record. A row without a parseable click_time is
        rejected; no substitute timestamp is ever generated.
        """

        values = self._normalize_fields(mapped_row, CLICK_FIELDS)
        errors = _required_field_errors(
            ReportType.CLICKS,
            values=values,
            mapped_row=mapped_row,
            row_number=row_number,
        )
        if errors:
            return None, errors

        if values["click_pv"] is None:
            values["click_pv"] = 1
        return ClickRecord(**values), []

    def _normalize_fields(
        self,
        mapped_row: Mapping[str, str | None],
        canonical_fields: tuple[CanonicalField, ...],
    ) -> dict[str, Any]:
        return {
            canonical_field.value: self._normalizer.normalize(
                canonical_field,
                mapped_row.get(canonical_field.value),
            )
            for canonical_field in canonical_fields
        }


def _required_field_errors(
    report_type: ReportType,
    *,
    values: Mapping[str, Any],
    mapped_row: Mapping[str, str | None],
    row_number: int,
) -> list[RowValidationError]:
    errors: list[RowValidationError] = []
    for required in REQUIRED_FIELDS[report_type]:
        if values[required.value] is not None:
            continue

        raw_value = mapped_row.get(required.value)
        errors.append(
            RowValidationError(
                row_number=row_number,
                column=required.value,
                message=MISSING_VALUE_MESSAGE if _is_blank(raw_value) else _invalid_message(required),
                value=_stringify(raw_value),
            )
        )
    return errors


def _invalid_message(canonical_field: CanonicalField) -> str:
    if canonical_field.kind is FieldKind.INTEGER:
        return f"{canonical_field.value} must be an integer."
    if canonical_field.kind is FieldKind.DATETIME:
        return "Invalid date/time format."
    return f"Invalid value for {canonical_field.value}."


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _stringify(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
