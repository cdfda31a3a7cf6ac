# backend/owner_admin/cli/__main__.py
from __future__ import annotations

import argparse

from owner_admin.cli.seed_demo import seed_demo
from owner_admin.db import SessionLocal
from owner_admin.services.otp_service import cleanup_expired_otps


def _sweep_otps(args: argparse.Namespace) -> None:
    db = SessionLocal()
    try:
        n = cleanup_expired_otps(db)
    finally:
        db.close()
    print({"ok": True, "deleted": n})


def _seed_demo(args: argparse.Namespace) -> None:
    try:
        out = seed_demo(
            admin_email=args.admin_email,
            owner_email=args.owner_email,
            accountant_email=args.accountant_email,
            password=args.password,
            create_sample_properties=(not args.no_sample_properties),
        )
    except ValueError as e:
        raise SystemExit(f"seed-demo: {e}")
    print(
        {
            "ok": True,
            "admin_email": out.admin_email,
            "owner_email": out.owner_email,
            "accountant_email": out.accountant_email,
            "property_ids": out.property_ids,
        }
    )


def main() -> None:
    p = argparse.ArgumentParser(prog="owner_admin")
    sub = p.add_subparsers(dest="command", required=True)

    sweep = sub.add_parser("sweep-otps", help="delete expired one-time passwords")
    sweep.set_defaults(func=_sweep_otps)

    seed = sub.add_parser("seed-demo", help="create a demo admin, owner, accountant and properties")
    seed.add_argument("--admin-email", default="admin@demo.local")
    seed.add_argument("--owner-email", default="owner@demo.local")
    seed.add_argument("--accountant-email", default="accountant@demo.local")
    seed.add_argument("--password", default="demo-password")
    seed.add_argument("--no-sample-properties", action="store_true")
    seed.set_defaults(func=_seed_demo)

    args = p.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
