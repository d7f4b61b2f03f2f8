"""Store settings.

Defaults live on the Settings dataclass.  A ``settings.json`` in the data
directory may override any of them, and a few environment variables
override the file:

* ``STOREFRONT_DATA_DIR``: where the JSON files live
* ``STOREFRONT_LOG_LEVEL``: log level name
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.customer import PaymentMethod
from storefront.domain.model.value_objects import DEFAULT_CURRENCY

DATA_DIR_ENV = "STOREFRONT_DATA_DIR"
LOG_LEVEL_ENV = "STOREFRONT_LOG_LEVEL"
SETTINGS_FILE = "settings.json"

# Project root when installed in editable mode.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    store_name: str = "Storefront"
    currency: str = DEFAULT_CURRENCY
    shipping_enabled: bool = True
    free_shipping_threshold: Decimal = Decimal("200")
    shipping_fee: Decimal = Decimal("25")
    tax_rate: Decimal = Decimal("0")
    whatsapp_phone: str = "+971547751901"
    enabled_methods: frozenset[PaymentMethod] = field(
        default_factory=lambda: frozenset(
            {PaymentMethod.HOME_DELIVERY, PaymentMethod.WHATSAPP, PaymentMethod.BANK_TRANSFER}
        )
    )
    store_timeout: float = 5.0
    strict_stock: bool = False
    reconcile_partial_failures: bool = True
    log_level: str = "INFO"
    json_logs: bool = False


def load_settings(data_dir: Path | None = None, environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from defaults, ``settings.json`` and the environment."""
    env = os.environ if environ is None else environ
    if data_dir is None:
        data_dir = Path(env[DATA_DIR_ENV]) if env.get(DATA_DIR_ENV) else DEFAULT_DATA_DIR

    settings = Settings(data_dir=data_dir)
    path = data_dir / SETTINGS_FILE
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValidationError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ValidationError(f"{path} must hold a JSON object")
        settings = _apply(settings, raw)

    if env.get(LOG_LEVEL_ENV):
        settings = replace(settings, log_level=_log_level(env[LOG_LEVEL_ENV]))
    return settings


def _apply(settings: Settings, raw: dict) -> Settings:
    known = {f.name for f in fields(Settings)} - {"data_dir"}
    unknown = set(raw) - known
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    changes: dict = {}
    for name, value in raw.items():
        if name in ("free_shipping_threshold", "shipping_fee", "tax_rate"):
            changes[name] = _non_negative_decimal(name, value)
        elif name in ("shipping_enabled", "strict_stock", "reconcile_partial_failures", "json_logs"):
            if not isinstance(value, bool):
                raise ValidationError(f"Setting '{name}' must be true or false")
            changes[name] = value
        elif name == "store_timeout":
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValidationError("Setting 'store_timeout' must be a positive number")
            changes[name] = float(value)
        elif name == "enabled_methods":
            changes[name] = _methods(value)
        elif name == "log_level":
            changes[name] = _log_level(value)
        else:
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Setting '{name}' must be a non-empty string")
            changes[name] = value.strip()
    return replace(settings, **changes)


def _non_negative_decimal(name: str, value) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Setting '{name}' must be a number") from exc
    if isinstance(value, bool) or not result.is_finite() or result < 0:
        raise ValidationError(f"Setting '{name}' must be a non-negative number")
    return result


def _methods(value) -> frozenset[PaymentMethod]:
    if not isinstance(value, list):
        raise ValidationError("Setting 'enabled_methods' must be a list")
    try:
        return frozenset(PaymentMethod(v) for v in value)
    except ValueError as exc:
        valid = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Unknown payment method in 'enabled_methods' (valid: {valid})") from exc


def _log_level(value) -> str:
    level = str(value).upper()
    if level not in _LOG_LEVELS:
        raise ValidationError(f"Unknown log level '{value}'")
    return level
