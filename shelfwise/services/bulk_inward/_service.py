from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from flask import current_app

from ...models import db
from ...utils.error_messages import ErrorMessages as EM
from ...utils.timezone_utils import TimezoneUtils
from ..errors import ValidationError
from ..inventory_adjustment import (
    BULK_INWARD_ACTION,
    increment_counter,
    load_counters_for_skus,
    reload_product_counters,
    stage_log_entry,
)
from ..location_hierarchy import validate_location_chain
from ..placement_service import LOCATION_MODELS, ShelfTarget, load_locations, stage_inward
from ._batching import DEFAULT_MAX_OPERATIONS, ChunkCommitError, WriteBatch
from ._parsing import parse_upload, validate_structure
from ._results import encode_result_file
from ._rows import STATUS_ERROR, STATUS_SKIPPED, STATUS_SUCCESS, InwardRow, RowResult

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION_WINDOW = 10
INWARD_FIELD = 'inward_addition'

CREATED_MESSAGE = (
    'Created placement "{placement_id}" for business product {sku} in shelf "{shelf}", '
    'rack "{rack}", zone "{zone}", warehouse "{warehouse}".'
)
INCREMENTED_MESSAGE = (
    'Added {quantity} units to placement "{placement_id}" for business product {sku} in shelf "{shelf}", '
    'rack "{rack}", zone "{zone}", warehouse "{warehouse}".'
)

# row attribute holding the code for each location kind
_CODE_ATTRS = {
    'Warehouse': 'warehouse_code',
    'Zone': 'zone_code',
    'Rack': 'rack_code',
    'Shelf': 'shelf_code',
}


@dataclass
class ImportSummary:
    total: int
    success: int
    skipped: int
    errors: int
    aborted: bool
    dry_run: bool
    committed_chunks: int
    results: list = field(default_factory=list)
    result_file: Optional[dict] = None

    @property
    def message(self) -> str:
        if self.aborted:
            return 'Bulk inward aborted after a failed commit; earlier chunks were saved'
        if self.dry_run:
            return 'Bulk inward dry run completed; nothing was saved'
        return 'Bulk inward completed'

    def to_dict(self) -> dict:
        return {
            'success': not self.aborted,
            'message': self.message,
            'summary': {
                'total': self.total,
                'success': self.success,
                'skipped': self.skipped,
                'errors': self.errors,
            },
            'aborted': self.aborted,
            'dryRun': self.dry_run,
            'committedChunks': self.committed_chunks,
            'resultFile': self.result_file,
        }


@dataclass
class _WindowLookup:
    locations: dict
    products: dict


class BulkInwardService:
    """Places stock onto shelves from a spreadsheet, one validated row at a time."""

    def __init__(
        self,
        business_id: str,
        user,
        *,
        max_operations: int | None = None,
        resolution_window: int | None = None,
        user_agent: str | None = None,
    ):
        if not business_id:
            raise ValidationError(EM.BUSINESS_ID_REQUIRED)
        self.business_id = business_id
        self.user = user
        self.actor_id = str(user.id) if user is not None else None
        self.user_agent = user_agent

        config = current_app.config
        self.max_operations = max_operations or config.get('BULK_INWARD_MAX_BATCH_OPERATIONS', DEFAULT_MAX_OPERATIONS)
        self.resolution_window = resolution_window or config.get('BULK_INWARD_RESOLUTION_WINDOW', DEFAULT_RESOLUTION_WINDOW)

    def import_file(self, filename: str, stream: Any, *, dry_run: bool = False) -> ImportSummary:
        """Parse, validate and apply an upload.

        Structural problems raise ``ValidationError`` before anything is
        written. Everything after that is reported per row.
        """
        payload = stream.read() if hasattr(stream, 'read') else bytes(stream)
        sheet = parse_upload(filename, payload)
        validate_structure(sheet)

        results = self._classify_rows(sheet.rows)
        logger.info(
            f"BULK INWARD: business={self.business_id}, file={filename}, rows={len(results)}, "
            f"dry_run={dry_run}, actor={self.actor_id}"
        )

        batch = WriteBatch(db.session, max_operations=self.max_operations, dry_run=dry_run)
        reference = f"bulk_inward:{filename}"[:255]
        aborted = False
        try:
            self._process(results, batch, reference, dry_run)
        except ChunkCommitError as exc:
            aborted = True
            logger.error(f"Bulk inward for {self.business_id} aborted: {exc}")
            for result in results:
                if result.is_pending:
                    result.error(EM.ROW_NOT_PROCESSED)

        summary = ImportSummary(
            total=len(results),
            success=sum(1 for r in results if r.status == STATUS_SUCCESS),
            skipped=sum(1 for r in results if r.status == STATUS_SKIPPED),
            errors=sum(1 for r in results if r.status == STATUS_ERROR),
            aborted=aborted,
            dry_run=dry_run,
            committed_chunks=batch.committed_chunks,
            results=results,
        )
        summary.result_file = encode_result_file(results)
        logger.info(
            f"BULK INWARD DONE: business={self.business_id}, total={summary.total}, success={summary.success}, "
            f"skipped={summary.skipped}, errors={summary.errors}, aborted={aborted}"
        )
        return summary

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _classify_rows(self, mappings):
        results = []
        for index, mapping in enumerate(mappings):
            # header is sheet row 1
            row = InwardRow.from_mapping(mapping, index + 2)
            if row.is_blank:
                continue
            result = RowResult(row=row)
            error = row.validation_error()
            if error:
                result.error(error)
            results.append(result)
        return results

    def _process(self, results, batch: WriteBatch, reference: str, dry_run: bool):
        candidates = [result for result in results if result.is_pending]
        for start in range(0, len(candidates), self.resolution_window):
            window = candidates[start:start + self.resolution_window]
            lookup = self._resolve_window(window)
            for result in window:
                staged = self._check_row(result, lookup)
                if staged is None:
                    continue
                target, product = staged
                batch.stage(result, self._inward_write(result.row, target, product, reference, dry_run))
                batch.flush_if_full()
        batch.flush_remainder()

    def _resolve_window(self, window) -> _WindowLookup:
        """One keyed query per entity kind for every code in the window."""
        rows = [result.row for result in window]
        locations = {
            kind: load_locations(model, self.business_id, (getattr(row, _CODE_ATTRS[kind]) for row in rows))
            for kind, model in LOCATION_MODELS
        }
        products = load_counters_for_skus(self.business_id, (row.sku for row in rows))
        return _WindowLookup(locations=locations, products=products)

    def _check_row(self, result: RowResult, lookup: _WindowLookup):
        row = result.row
        records = {}
        for kind, _model in LOCATION_MODELS:
            code = getattr(row, _CODE_ATTRS[kind])
            record = lookup.locations[kind].get(code)
            if record is None:
                result.skipped(EM.LOCATION_NOT_FOUND.format(kind=kind, code=code))
                return None
            records[kind] = record

        check = validate_location_chain(records['Shelf'], records['Rack'], records['Zone'], records['Warehouse'])
        if not check:
            result.skipped(EM.SHELF_PATH_MISMATCH.format(details=check.describe_mismatch()))
            return None

        product = lookup.products.get(row.sku)
        if product is None:
            result.skipped(EM.ROW_PRODUCT_NOT_FOUND.format(sku=row.sku))
            return None

        target = ShelfTarget.from_records(records['Shelf'], records['Rack'], records['Zone'], records['Warehouse'])
        return target, product

    def _inward_write(self, row: InwardRow, target: ShelfTarget, product, reference: str, dry_run: bool):
        business_id = self.business_id
        actor = self.user
        actor_id = self.actor_id
        user_agent = self.user_agent
        quantity = row.quantity

        def apply(session):
            now = TimezoneUtils.utc_now()
            increment_counter(session, product.product_id, INWARD_FIELD, quantity, actor_id=actor_id, now=now)
            placement_id, created = stage_inward(
                session,
                business_id=business_id,
                sku=row.sku,
                target=target,
                amount=quantity,
                actor_id=actor_id,
                reason='inward_addition',
                reference=reference,
                now=now,
            )
            current = reload_product_counters(product.product_id).snapshot
            stage_log_entry(
                session,
                business_id=business_id,
                product_id=product.product_id,
                field_name=INWARD_FIELD,
                previous=current.incremented(INWARD_FIELD, -quantity),
                current=current,
                adjustment_type='inward',
                amount=quantity,
                actor=actor,
                action=BULK_INWARD_ACTION,
                placement=target.snapshot(placement_id),
                user_agent=user_agent,
                source='bulk_inward',
                performed_at=now,
            )
            if dry_run:
                return EM.ROW_DRY_RUN.format(placement_id=placement_id, quantity=quantity)
            template = CREATED_MESSAGE if created else INCREMENTED_MESSAGE
            return template.format(
                quantity=quantity,
                placement_id=placement_id,
                sku=row.sku,
                shelf=target.shelf_code,
                rack=target.rack_code,
                zone=target.zone_code,
                warehouse=target.warehouse_code,
            )

        return apply
