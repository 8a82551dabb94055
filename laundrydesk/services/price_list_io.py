# laundrydesk/services/price_list_io.py
"""Price list spreadsheet import/export (.xlsx via openpyxl, or .csv)."""
import logging
import os

import pandas as pd

from ..extensions import db
from ..model import Service
from ..utils.money import parse_money, round_money

log = logging.getLogger(__name__)

COLUMNS = {
    "Name": "name",
    "Description": "description",
    "Base Price": "base_price",
    "Price Per Item": "price_per_item",
    "Price Per Kg": "price_per_kg",
    "Active": "is_active",
}

def _is_excel(path):
    return os.path.splitext(path)[1].lower() in (".xlsx", ".xls")

def price_list_frame(include_inactive=True) -> pd.DataFrame:
    q = Service.query.order_by(Service.name)
    if not include_inactive:
        q = q.filter(Service.is_active.is_(True))
    rows = [
        {
            "ID": s.id,
            "Name": s.name,
            "Description": s.description,
            "Base Price": float(s.base_price or 0),
            "Price Per Item": float(s.price_per_item or 0),
            "Price Per Kg": float(s.price_per_kg or 0),
            "Active": bool(s.is_active),
        }
        for s in q.all()
    ]
    return pd.DataFrame(rows, columns=["ID", *COLUMNS])

def export_price_list(path, include_inactive=True) -> int:
    df = price_list_frame(include_inactive)
    if _is_excel(path):
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    log.info("exported %s services to %s", len(df), path)
    return len(df)

def _cell(row, column):
    value = row.get(column)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return value

def _price(row, column, line):
    raw = _cell(row, column)
    if raw is None or raw == "":
        return round_money(0)
    value = parse_money(raw)
    if value is None or value < 0:
        raise ValueError(f"row {line}: {column} must be a non-negative number")
    return round_money(value)

def _active(raw):
    if raw is None:
        return True
    if isinstance(raw, str):
        return raw.strip().lower() not in ("false", "no", "0", "n")
    return bool(raw)

def import_price_list(path) -> dict:
    """Upsert services by name. The whole file is rejected if any row is invalid."""
    df = pd.read_excel(path) if _is_excel(path) else pd.read_csv(path)
    df.columns = df.columns.str.strip()
    if "Name" not in df.columns:
        raise ValueError("price list needs a 'Name' column")

    created = updated = 0
    for i, row in enumerate(df.to_dict("records"), start=2):
        name = str(_cell(row, "Name") or "").strip()
        if not name:
            raise ValueError(f"row {i}: Name is required")
        fields = {
            "base_price": _price(row, "Base Price", i),
            "price_per_item": _price(row, "Price Per Item", i),
            "price_per_kg": _price(row, "Price Per Kg", i),
            "is_active": _active(_cell(row, "Active")),
        }
        description = _cell(row, "Description")
        if description is not None:
            fields["description"] = str(description)

        service = Service.query.filter_by(name=name).first()
        if service:
            for key, value in fields.items():
                setattr(service, key, value)
            updated += 1
        else:
            db.session.add(Service(name=name, **fields))
            created += 1

    db.session.commit()
    log.info("imported price list %s: %s created, %s updated", path, created, updated)
    return {"created": created, "updated": updated}
