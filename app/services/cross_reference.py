"""
RiskWise — Risk & Issue Dashboard
Cross-referencer: joins normalized records against the product directory.

The join keys are asymmetric. Risks carry a product code, issues carry a
product name, so the index is built both ways once per batch:

    risk.projectCode  == product.code  → projectName = product.name
    issue.projectName == product.name  → projectCode = product.code
"""

import dataclasses
import logging

from app.models.risk_issue import Product, NormalizedRiskIssue, UNKNOWN_PROJECT

logger = logging.getLogger(__name__)


class ProductIndex:
    """Lookup tables over the product list. First product wins on duplicate keys."""

    def __init__(self, products=()):
        self.products: list[Product] = []
        self._by_code: dict[str, Product] = {}
        self._by_name: dict[str, Product] = {}
        for product in products:
            self.add(product)

    @classmethod
    def build(cls, raw_products) -> "ProductIndex":
        """Index raw product documents (``{"id", "code", "name", ...}``)."""
        return cls(
            p if isinstance(p, Product) else Product.from_dict(p)
            for p in raw_products or ()
        )

    def add(self, product: Product) -> None:
        self.products.append(product)
        if product.code:
            self._by_code.setdefault(product.code, product)
        if product.name:
            self._by_name.setdefault(product.name, product)

    def by_code(self, code) -> Product | None:
        return self._by_code.get(code) if code else None

    def by_name(self, name) -> Product | None:
        return self._by_name.get(name) if name else None

    def __len__(self):
        return len(self.products)


def cross_reference(record: NormalizedRiskIssue, index: ProductIndex) -> NormalizedRiskIssue:
    """Fill the project field the record's own type does not carry."""
    if record.is_risk:
        product = index.by_code(record.project_code)
        name = product.name if product else (record.project_code or UNKNOWN_PROJECT)
        return dataclasses.replace(record, project_name=name)

    # A missing name never matches; "Unknown" is display-only
    product = index.by_name(record.project_name) if record.project_name else None
    return dataclasses.replace(
        record,
        project_name=record.project_name or UNKNOWN_PROJECT,
        project_code=product.code if product else None,
    )


def cross_reference_many(records, index: ProductIndex) -> list[NormalizedRiskIssue]:
    return [cross_reference(r, index) for r in records]
