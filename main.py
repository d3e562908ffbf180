from contextlib import asynccontextmanager
from typing import Optional

import click
import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.blog.routers import router as blog_router
from apps.blog.services import AvatarResolver
from apps.blog.storage import BlobStore, PostRepository
from config.db import close_db, init_db
from config.logging import setup_logging
from config.middleware import RequestLoggingMiddleware
from config.settings import DATABASE_URL, HOST, PORT

logger = structlog.get_logger()


def create_app(db_url: Optional[str] = None) -> FastAPI:
    db_url = db_url or DATABASE_URL

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(db_url)
        logger.info('database_ready', db_url=db_url)
        try:
            yield
        finally:
            await close_db()

    app = FastAPI(title='postboard', lifespan=lifespan)

    # one shared set of components per process
    app.state.blob_store = BlobStore()
    app.state.posts = PostRepository()
    app.state.avatars = AvatarResolver(app.state.blob_store)

    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(blog_router)

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_http_error(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    return app


app = create_app()


@click.command()
@click.option('--db-file', type=click.Path(dir_okay=False), default=None,
              help='SQLite database file (runs in memory when omitted).')
@click.option('--host', default=HOST, show_default=True)
@click.option('--port', default=PORT, show_default=True, type=int)
def cli(db_file: Optional[str], host: str, port: int):
    """Run the blog server."""
    setup_logging()
    db_url = f'sqlite://{db_file}' if db_file else DATABASE_URL
    uvicorn.run(create_app(db_url), host=host, port=port, log_config=None)


if __name__ == '__main__':
    cli()
