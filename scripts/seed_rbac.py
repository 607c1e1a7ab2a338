from __future__ import annotations

import asyncio
import sys

from fieldops.persistence.db import SessionLocal
from fieldops.services.rbac_seed import MATRIX, SCREENS, seed_rbac


async def run_seed() -> int:
    # Use the shared async session factory so env config matches the API.
    async with SessionLocal() as session:
        roles = await seed_rbac(session)
        await session.commit()
    grants = sum(len(grants) for grants in MATRIX.values())
    print(f"Seeded {len(roles)} roles, {len(SCREENS)} screens and {grants} grants.")
    return 0


def main() -> int:
    # Surface clear failures and exit non-zero so deploy scripts can detect issues.
    try:
        return asyncio.run(run_seed())
    except Exception as exc:  # noqa: BLE001 - surface any setup or DB errors
        print(f"seed_rbac failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
