"""JSON-file-backed implementation of InventoryRepository."""

from __future__ import annotations

from pathlib import Path

from storefront.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    PersistenceError,
)
from storefront.domain.model.inventory import InventoryRecord
from storefront.domain.repository.inventory_repository import InventoryRepository
from storefront.infrastructure.persistence.json_file import DEFAULT_TIMEOUT, JsonFile


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, file_path: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._file = JsonFile(file_path, timeout)

    # --- InventoryRepository interface ----------------------------------------

    def get(self, sku: str) -> InventoryRecord | None:
        for raw in self._file.load():
            if raw["sku"] == sku:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[InventoryRecord]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, record: InventoryRecord) -> None:
        with self._file.locked():
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["sku"] == record.sku:
                    records[i] = self._to_raw(record)
                    break
            else:
                records.append(self._to_raw(record))
            self._file.persist(records)

    def decrement(self, sku: str, quantity: int) -> int | None:
        with self._file.locked():
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["sku"] == sku:
                    record = self._to_domain(raw)
                    removed = record.decrement(quantity)
                    records[i] = self._to_raw(record)
                    self._file.persist(records)
                    return removed
        return None

    def restore(self, sku: str, quantity: int) -> None:
        with self._file.locked():
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["sku"] == sku:
                    record = self._to_domain(raw)
                    record.restore(quantity)
                    records[i] = self._to_raw(record)
                    self._file.persist(records)
                    return
        raise EntityNotFoundError(f"No stock record for '{sku}'")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(record: InventoryRecord) -> dict:
        return {"sku": record.sku, "stock": record.stock}

    @staticmethod
    def _to_domain(raw: dict) -> InventoryRecord:
        try:
            return InventoryRecord(sku=raw["sku"], stock=int(raw["stock"]))
        except (KeyError, TypeError, ValueError, DomainException) as exc:
            raise PersistenceError(f"Malformed stock record {raw.get('sku', '?')!r}: {exc}") from exc
