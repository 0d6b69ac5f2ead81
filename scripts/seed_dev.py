#!/usr/bin/env python
"""Seed development database with a starter skills catalog.

Constraints:
- Refuses to run in staging or prod (SKILLSWAP_ENV check)
- Idempotent: skills are matched by name and never duplicated
- Never runs automatically (manual invocation only)

Usage:
    DATABASE_URL=... python scripts/seed_dev.py
"""

import os
import sys

SEED_SKILLS = [
    ("Guitar", "Music", "Chords, strumming and first songs"),
    ("Python", "Programming", "Scripting and automation basics"),
    ("Spanish", "Languages", "Conversational practice"),
    ("Sourdough baking", "Cooking", "Starter care and shaping"),
    ("Watercolor", "Art", "Washes, layering and color mixing"),
]


def main():
    skillswap_env = os.getenv("SKILLSWAP_ENV", "local")
    if skillswap_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in SKILLSWAP_ENV={skillswap_env}")
        sys.exit(1)

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from sqlalchemy import create_engine, select

    from skillswap.db.models import Skill
    from skillswap.db.session import create_session_factory, transaction

    engine = create_engine(database_url)
    db = create_session_factory(engine)()

    created = 0
    try:
        with transaction(db):
            existing = set(db.execute(select(Skill.name)).scalars())
            for name, category, description in SEED_SKILLS:
                if name in existing:
                    continue
                db.add(Skill(name=name, category=category, description=description))
                created += 1
    finally:
        db.close()
        engine.dispose()

    print(f"Seeded {created} skills ({len(SEED_SKILLS) - created} already present)")


if __name__ == "__main__":
    main()
