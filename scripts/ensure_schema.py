"""
Create missing tables (without touching existing data) and, optionally,
an operator account.

Run:
  python scripts/ensure_schema.py
  python scripts/ensure_schema.py --user admin --password secret --name "Workshop owner"
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import inspect

# project root on sys.path so the script runs from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tailor_payroll import create_app  # noqa: E402
from tailor_payroll.extensions import db  # noqa: E402
from tailor_payroll.models import User  # noqa: E402


def _tables() -> set[str]:
    return set(inspect(db.engine).get_table_names())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--user", help="operator login to create or reset")
    parser.add_argument("--password", help="password for --user")
    parser.add_argument("--name", default="", help="display name for --user")
    args = parser.parse_args(argv)

    if args.user and not args.password:
        parser.error("--password is required with --user")

    app = create_app()
    with app.app_context():
        print(f"[ensure] SQLALCHEMY_DATABASE_URI = {app.config.get('SQLALCHEMY_DATABASE_URI', '')}")
        before = _tables()
        print(f"[ensure] tables before: {len(before)}")

        db.create_all()

        created = sorted(_tables() - before)
        if created:
            print(f"[ensure] created tables: {', '.join(created)}")
        else:
            print("[ensure] no new tables needed.")

        if args.user:
            u = User.query.filter_by(username=args.user).first()
            if u is None:
                u = User(username=args.user)
                db.session.add(u)
                print(f"[ensure] creating operator {args.user!r}")
            else:
                print(f"[ensure] resetting password of {args.user!r}")
            u.full_name = args.name or u.full_name or ""
            u.is_active = True
            u.set_password(args.password)
            db.session.commit()

        print("[ensure] done.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
