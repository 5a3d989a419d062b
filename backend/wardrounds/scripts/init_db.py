"""
Create the tables this service owns (notification_queue, fcm_tokens).
The SIMRS tables (user, dokter, kamar_inap, ...) already exist and are never touched.
Run with: python -m wardrounds.scripts.init_db
"""

import asyncio
from wardrounds.config import get_settings
from wardrounds.database import Base, build_engine
from wardrounds.models import NotificationQueue, PushToken

OWNED_TABLES = [NotificationQueue.__table__, PushToken.__table__]


async def init():
    print("Creating notification tables...")
    engine = build_engine(get_settings())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, tables=OWNED_TABLES)
    print("Notification tables created successfully.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init())
