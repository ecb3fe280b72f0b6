"""
RiskWise — Risk & Issue Dashboard
Product directory service.

Products are read-only from the pipeline's point of view; this module only
lists them, adds one at a time (admin) and seeds the demo directory.
"""

import logging

from app.core.exceptions import ValidationError
from app.models.document import COLLECTION_PRODUCTS
from app.models.risk_issue import Product
from app.services.document_store import DocumentStore
from app.utils.helpers import is_blank, to_float

logger = logging.getLogger(__name__)


DEFAULT_PRODUCTS = [
    {"code": "P-12345", "name": "Project Phoenix", "paNumber": "PA-2024-01", "value": 1500000, "currentStatus": "On Track"},
    {"code": "P-67890", "name": "Quantum Leap Initiative", "paNumber": "PA-2024-02", "value": 3200000, "currentStatus": "Delayed"},
    {"code": "P-13579", "name": "DataStream Integration", "paNumber": "PA-2024-03", "value": 750000, "currentStatus": "Completed"},
    {"code": "P-24680", "name": "NextGen UI Framework", "paNumber": "PA-2024-04", "value": 500000, "currentStatus": "On Hold"},
    {"code": "P-97531", "name": "Cloud Migration Phase 2", "paNumber": "PA-2024-05", "value": 2100000, "currentStatus": "On Track"},
    {"code": "P-11223", "name": "Project Titan", "paNumber": "PA-2025-01", "value": 5000000, "currentStatus": "On Track"},
    {"code": "P-44556", "name": "Helios Solar Array", "paNumber": "PA-2025-02", "value": 7800000, "currentStatus": "On Track"},
    {"code": "P-77889", "name": "Orion Space Probe", "paNumber": "PA-2025-03", "value": 12000000, "currentStatus": "Delayed"},
    {"code": "P-99001", "name": "CyberGuard Security", "paNumber": "PA-2025-04", "value": 950000, "currentStatus": "Completed"},
    {"code": "P-23456", "name": "AquaPure Water Filter", "paNumber": "PA-2025-05", "value": 450000, "currentStatus": "On Hold"},
    {"code": "P-78901", "name": "Bio-Synth Genetics", "paNumber": "PA-2026-01", "value": 6300000, "currentStatus": "On Track"},
    {"code": "P-23457", "name": "Project Chimera", "paNumber": "PA-2026-02", "value": 2500000, "currentStatus": "On Track"},
    {"code": "P-89012", "name": "Fusion Core Reactor", "paNumber": "PA-2026-03", "value": 25000000, "currentStatus": "Delayed"},
    {"code": "P-34567", "name": "SmartGrid Analytics", "paNumber": "PA-2026-04", "value": 1800000, "currentStatus": "Completed"},
    {"code": "P-90123", "name": "Robo-Advisor Platform", "paNumber": "PA-2026-05", "value": 1200000, "currentStatus": "On Hold"},
]


def list_products(store: DocumentStore | None = None) -> list[Product]:
    store = store or DocumentStore()
    return [Product.from_dict(doc) for doc in store.list_documents(COLLECTION_PRODUCTS)]


def create_product(data: dict, store: DocumentStore | None = None) -> Product:
    """Add one product. ``code`` and ``name`` must be unique and non-blank.

    Raises:
        ValidationError: missing/duplicate code or name, negative value.
    """
    store = store or DocumentStore()
    data = data or {}
    errors = {}
    for key in ("code", "name"):
        if is_blank(data.get(key)):
            errors[key] = f"{key} is required"

    value = to_float(data.get("value", 0))
    if value is None or value < 0:
        errors["value"] = "value must be a non-negative number"

    if not errors:
        existing = list_products(store)
        if any(p.code == str(data["code"]).strip() for p in existing):
            errors["code"] = f"Product code {data['code']!r} already exists"
        if any(p.name == str(data["name"]).strip() for p in existing):
            errors["name"] = f"Product name {data['name']!r} already exists"
    if errors:
        raise ValidationError("Invalid product", details=errors)

    payload = {
        "code": str(data["code"]).strip(),
        "name": str(data["name"]).strip(),
        "paNumber": str(data.get("paNumber") or ""),
        "value": value,
        "currentStatus": str(data.get("currentStatus") or ""),
    }
    return Product.from_dict(store.create(COLLECTION_PRODUCTS, payload))


def seed_default_products(store: DocumentStore | None = None) -> int:
    """Insert the demo directory entries whose code is not present yet.

    Returns:
        Number of products created.
    """
    store = store or DocumentStore()
    known = {p.code for p in list_products(store)}
    created = 0
    for idx, entry in enumerate(DEFAULT_PRODUCTS, start=1):
        if entry["code"] in known:
            continue
        store.create(COLLECTION_PRODUCTS, entry, doc_id=f"prod-{idx:03d}")
        created += 1
    logger.info("Seeded %d product(s)", created)
    return created
