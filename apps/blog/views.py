from uuid import UUID

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from apps.blog.exceptions import BadRequest, NotFound, StorageFailure
from apps.blog.services import SubmissionPipeline
from apps.blog.templates import render_frontpage
from config.settings import FRONTPAGE_LOCATION
from utils.headers import is_valid_header_value

logger = structlog.get_logger()


def _pipeline(request: Request) -> SubmissionPipeline:
    state = request.app.state
    return SubmissionPipeline(state.blob_store, state.posts, state.avatars)


async def frontpage(request: Request):
    posts = await request.app.state.posts.list_all()
    return HTMLResponse(render_frontpage(posts))


async def add_post(request: Request):
    try:
        await _pipeline(request).submit_request(request)
    except BadRequest as e:
        raise HTTPException(status_code=400, detail=e.reason)
    return RedirectResponse(FRONTPAGE_LOCATION, status_code=303)


async def serve_data(request: Request, file_id: str):
    try:
        blob_id = UUID(file_id)
    except ValueError:
        raise HTTPException(status_code=404, detail='invalid id')

    try:
        content_type, data = await request.app.state.blob_store.get(blob_id)
    except NotFound:
        raise HTTPException(status_code=404, detail='data not found')
    except StorageFailure as e:
        logger.error('blob_read_failed', blob_id=file_id, error=str(e))
        raise HTTPException(status_code=404, detail='data not found')

    if not is_valid_header_value(content_type):
        logger.warning('blob_bad_content_type', blob_id=file_id, content_type=content_type)
        raise HTTPException(status_code=404, detail='data not found')
    return Response(content=data, headers={'content-type': content_type})
