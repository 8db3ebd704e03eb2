"""Print row counts for every table and the resolved single user."""

import asyncio
from datetime import datetime, timezone

from sqlalchemy import func, select

from progress_companion.core.errors import MissingPrerequisite
from progress_companion.db.session import async_session_maker, engine, session_scope
from progress_companion.models import BodyCompositionScan, FoodLogEntry, Measurement, User, UserProfile, Workout
from progress_companion.services.stores import SqlProfileReader

TABLES = (User, UserProfile, Measurement, FoodLogEntry, Workout, BodyCompositionScan)


async def check_data():
    async with session_scope(async_session_maker) as session:
        for model in TABLES:
            count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
            print(f"Table '{model.__tablename__}' row count: {count}")
    try:
        ctx = await SqlProfileReader().get_user_context(datetime.now(timezone.utc))
        print(f"User {ctx.user_id}, goal: {ctx.goal.value if ctx.goal else 'not set'}")
    except MissingPrerequisite as e:
        print(f"{e}: run scripts/seed_user.py")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(check_data())
