#!/usr/bin/env python3
"""Seed companies, bots, users and uploaded files for local dev.

One company per plan/status combination worth poking at with validate-daily:
  - Acme (professional, active, well under limit)   -> valid
  - Fullco (starter, active, storage at the limit)  -> "Storage limit exceeded"
  - Lapsed (starter, past_due)                       -> "Subscription inactive"
Storage usage is recalculated from the seeded files, as the nightly job would.
"""

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./dev_subscriptions.db")

from apps.subscription_api.db import ensure_tables
from apps.subscription_api.services.plans import GIB, PLAN_PROFESSIONAL, PLAN_STARTER, STATUS_ACTIVE, STATUS_PAST_DUE
from apps.subscription_api.services.repo import create_bot, create_company, create_user, insert_files
from apps.subscription_api.services.usage import recalculate_storage_usage

MIB = 1024 * 1024


def _seed_company(name: str, plan_level: str, status: str, file_sizes: list[int], limit: int | None = None) -> None:
    company = create_company(name, subscription_status=status, plan_level=plan_level, storage_limit_bytes=limit)
    bot = create_bot(company.id, f"{name} bot")
    create_user(company.id, f"owner@{name.lower()}.example", bot_id=bot.id)
    create_user(company.id, f"blocked@{name.lower()}.example", blocked=True)
    insert_files(
        company.id,
        [
            {"name": f"doc-{i}.pdf", "size_bytes": size, "mime": "application/pdf", "ext": ".pdf", "bot_id": bot.id}
            for i, size in enumerate(file_sizes)
        ],
    )
    recalc = recalculate_storage_usage(company.id)
    print(f"Seeded {name}: company={company.id} bot={bot.id} files={recalc.file_count} bytes={recalc.total_bytes}")


def main() -> int:
    ensure_tables()
    _seed_company("Acme", PLAN_PROFESSIONAL, STATUS_ACTIVE, [5 * MIB, 12 * MIB], limit=20 * GIB)
    _seed_company("Fullco", PLAN_STARTER, STATUS_ACTIVE, [GIB, GIB])
    _seed_company("Lapsed", PLAN_STARTER, STATUS_PAST_DUE, [MIB])
    return 0


if __name__ == "__main__":
    sys.exit(main())
