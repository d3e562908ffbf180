from typing import Optional

from tortoise import Tortoise, connections

from config.settings import DATABASE_URL

MODELS = ["apps.blog.models"]


async def init_db(db_url: Optional[str] = None) -> None:
    """Initialise Tortoise and create the posts/files tables if missing."""
    await Tortoise.init(db_url=db_url or DATABASE_URL, modules={"models": MODELS})
    await Tortoise.generate_schemas(safe=True)


async def close_db() -> None:
    await connections.close_all()
