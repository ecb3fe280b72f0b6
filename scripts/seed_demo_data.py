#!/usr/bin/env python3
"""
RiskWise — Demo Data Seed Script.

Loads the product directory plus demo risks and issues into the document
store. Without --append the three collections are emptied first.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --append
    python scripts/seed_demo_data.py --verbose
"""

import argparse
import sys

sys.path.insert(0, ".")

from app import create_app
from app.models import db
from app.models.document import COLLECTION_ISSUES, COLLECTION_RISKS, COLLECTIONS, Document
from app.services.document_store import DocumentStore
from app.services.product_service import seed_default_products
from app.services.risk_issue_service import load_snapshot

from scripts.seed_data.risk_issues import ISSUE_DATA, RISK_DATA


def seed_all(app, append=False, verbose=False):
    with app.app_context():
        store = DocumentStore()

        if not append:
            removed = Document.query.filter(Document.collection.in_(COLLECTIONS)).delete(
                synchronize_session=False)
            db.session.commit()
            print(f"🗑️  Cleared {removed} existing documents")

        # ── Products ─────────────────────────────────────────────────────
        product_count = seed_default_products(store)
        print(f"   📦 {product_count} products")

        # ── Risks / Issues ───────────────────────────────────────────────
        # Written raw: legacy-format documents would not pass the form rules
        for data in RISK_DATA:
            doc = store.create(COLLECTION_RISKS, data)
            if verbose:
                print(f"      risk  {doc['id']}  {data.get('Title') or data.get('description', '')[:40]}")
        print(f"   ⚠️  {len(RISK_DATA)} risks")

        for data in ISSUE_DATA:
            doc = store.create(COLLECTION_ISSUES, data)
            if verbose:
                print(f"      issue {doc['id']}  {data.get('Title') or data.get('title', '')}")
        print(f"   🔥 {len(ISSUE_DATA)} issues")

        # ── Sanity check through the read pipeline ───────────────────────
        snapshot = load_snapshot(store)
        total = product_count + len(RISK_DATA) + len(ISSUE_DATA)
        print(f"\n{'='*60}")
        print(f"🎉 DEMO DATA SEED COMPLETE — {total} documents, "
              f"{len(snapshot.records)} records normalize")
        print(f"{'='*60}\n")


def main():
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--append", action="store_true")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    app = create_app()
    print(f"🎯 DB: {app.config['SQLALCHEMY_DATABASE_URI']}\n")
    with app.app_context():
        db.create_all()
    seed_all(app, append=args.append, verbose=args.verbose)


if __name__ == "__main__":
    main()
