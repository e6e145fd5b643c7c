"""Create tables and seed the feedback form from its YAML definition.

Run after database migration, or against a fresh SQLite file for local use:

    python scripts/seed_form.py
    python scripts/seed_form.py isp-feedback-v1.yaml
"""

import asyncio
import sys

from feedback_app.core.config import settings
from feedback_app.core.logging import setup_logging
from feedback_app.db.init_db import create_tables, seed_form
from feedback_app.db.session import AsyncSessionLocal, engine


async def main(filename: str) -> int:
    setup_logging()
    await create_tables()

    async with AsyncSessionLocal() as session:
        form = await seed_form(session, filename)

    await engine.dispose()

    print("=" * 60)
    if form is None:
        print(f"Active form already present, nothing seeded ({filename})")
    else:
        print(f"Seeded form '{form.slug}' v{form.version}")
        print(f"  id:   {form.id}")
        print(f"  hash: {form.definition_hash}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    filename = sys.argv[1] if len(sys.argv) > 1 else settings.form_definition_file
    sys.exit(asyncio.run(main(filename)))
