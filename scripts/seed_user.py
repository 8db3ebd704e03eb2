"""Create the single app user (and an empty profile) if none exists.

Usage: python scripts/seed_user.py [--name NAME] [--goal fat_loss|muscle_gain|recomposition|maintenance]
"""

import argparse
import asyncio
import os
import sys

# Allow running from the repo root without installing
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select

from progress_companion.core.enums import Goal
from progress_companion.db.session import async_session_maker, engine, session_scope
from progress_companion.models import User, UserProfile


async def main(name: str, goal: str | None):
    async with session_scope(async_session_maker) as session:
        existing = (await session.execute(select(User).limit(1))).scalar_one_or_none()
        if existing is not None:
            print(f"User already exists: {existing.id}")
        else:
            user = User(name=name)
            user.profile = UserProfile(primary_goal=goal)
            session.add(user)
            await session.flush()
            print(f"Created user {user.id}")
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--name", default="Me")
    parser.add_argument("--goal", choices=[g.value for g in Goal], default=None)
    args = parser.parse_args()
    asyncio.run(main(args.name, args.goal))
