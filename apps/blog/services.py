import asyncio
import html
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union
from uuid import UUID

import httpx
import structlog
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect, Request

from apps.blog.exceptions import AvatarFetchFailure, BadRequest, StorageFailure
from apps.blog.forms import read_form
from apps.blog.storage import BlobStore, PostRepository
from config.settings import AVATAR_FETCH_TIMEOUT, AVATAR_MAX_BYTES
from utils.headers import is_valid_header_value

logger = structlog.get_logger()

DEFAULT_IMAGE_TYPE = 'image/png'

BAD_REQUEST = 'bad request'
BAD_USERNAME = 'bad username'
BAD_CONTENT = 'bad content'
BAD_AVATAR = 'bad user avatar'
BAD_IMAGE = 'bad image'

# plain multipart fields arrive as raw bytes, urlencoded fields as str
FormValue = Union[str, bytes, UploadFile]


class AvatarResolver:
    """Fetch a remote avatar once and keep its bytes in the blob store."""

    def __init__(
        self,
        blob_store: BlobStore,
        timeout: float = AVATAR_FETCH_TIMEOUT,
        max_bytes: int = AVATAR_MAX_BYTES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.blob_store = blob_store
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.transport = transport

    async def resolve(self, url: str) -> Optional[UUID]:
        """Return the blob id of the stored avatar, or None when there is nothing to store.

        Raises AvatarFetchFailure for any fetch or validation problem. StorageFailure
        from the blob store is passed through unchanged.
        """
        if not url:
            return None

        # self.timeout bounds the whole fetch, not just each socket read
        try:
            content_type, body = await asyncio.wait_for(self._fetch(url), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise AvatarFetchFailure(f'avatar at {url} took longer than {self.timeout}s') from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise AvatarFetchFailure(f'could not fetch avatar from {url}: {e}') from e

        if not body:
            logger.info('avatar_empty', url=url)
            return None
        blob_id = await self.blob_store.put(content_type, body)
        logger.info('avatar_stored', url=url, blob_id=str(blob_id), size=len(body))
        return blob_id

    async def _fetch(self, url: str) -> Tuple[str, bytes]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport,
                                     follow_redirects=True) as client:
            async with client.stream('GET', url) as resp:
                resp.raise_for_status()
                content_type = resp.headers.get('content-type')
                if not is_valid_header_value(content_type):
                    raise AvatarFetchFailure(f'avatar at {url} has no usable content type')
                return content_type, await self._drain(resp)

    async def _drain(self, resp: httpx.Response) -> bytes:
        declared = resp.headers.get('content-length')
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            raise AvatarFetchFailure(f'avatar declares {declared} bytes, limit is {self.max_bytes}')
        body = bytearray()
        async for chunk in resp.aiter_bytes():
            body.extend(chunk)
            if len(body) > self.max_bytes:
                raise AvatarFetchFailure(f'avatar exceeds {self.max_bytes} bytes')
        return bytes(body)


@dataclass
class _Draft:
    username: str = ''
    content: str = ''
    avatar_ref: Optional[UUID] = None
    image_ref: Optional[UUID] = None
    written: List[UUID] = field(default_factory=list)


async def _read_text(value: FormValue, reason: str) -> str:
    if isinstance(value, str):
        return value
    try:
        if isinstance(value, UploadFile):
            value = await value.read()
        return value.decode('utf-8')
    except (UnicodeDecodeError, OSError) as e:
        raise BadRequest(reason) from e


class SubmissionPipeline:
    """Turn one submitted form into one post.

    Fields are handled in the order the client sent them and the first failure
    aborts the submission. Blobs stored for earlier fields are left in place.
    """

    def __init__(self, blob_store: BlobStore, posts: PostRepository, avatars: AvatarResolver):
        self.blob_store = blob_store
        self.posts = posts
        self.avatars = avatars

    async def submit_request(self, request: Request) -> None:
        try:
            form = await read_form(request)
        except (MultiPartException, HTTPException, ClientDisconnect) as e:
            logger.warning('submission_unreadable', error=getattr(e, 'message', None) or repr(e))
            raise BadRequest(BAD_REQUEST) from e
        try:
            await self.submit(form.multi_items())
        finally:
            await form.close()

    async def submit(self, fields: Iterable[Tuple[str, FormValue]]) -> None:
        draft = _Draft()
        try:
            for name, value in fields:
                if name == 'username':
                    draft.username = await _read_text(value, BAD_USERNAME)
                elif name == 'useravatar':
                    url = await _read_text(value, BAD_AVATAR)
                    avatar_ref = await self._store_avatar(url)
                    if avatar_ref is not None:
                        draft.avatar_ref = avatar_ref
                        draft.written.append(avatar_ref)
                elif name == 'content':
                    draft.content = await _read_text(value, BAD_CONTENT)
                elif name == 'image':
                    image_ref = await self._store_image(value)
                    if image_ref is not None:
                        draft.image_ref = image_ref
                        draft.written.append(image_ref)

            if not draft.username or not draft.content:
                raise BadRequest(BAD_REQUEST)

            try:
                await self.posts.insert(
                    draft.username,
                    draft.avatar_ref,
                    html.escape(draft.content, quote=False),
                    draft.image_ref,
                )
            except (StorageFailure, ValueError) as e:
                raise BadRequest(BAD_REQUEST) from e
        except BadRequest as e:
            logger.warning('submission_rejected', reason=e.reason,
                           orphaned_blobs=[str(ref) for ref in draft.written])
            raise

    async def _store_avatar(self, url: str) -> Optional[UUID]:
        try:
            return await self.avatars.resolve(url)
        except (AvatarFetchFailure, StorageFailure) as e:
            logger.warning('avatar_failed', url=url, error=str(e))
            raise BadRequest(BAD_AVATAR) from e

    async def _store_image(self, value: FormValue) -> Optional[UUID]:
        if isinstance(value, UploadFile):
            content_type = value.content_type or DEFAULT_IMAGE_TYPE
            try:
                data = await value.read()
            except OSError as e:
                raise BadRequest(BAD_IMAGE) from e
        elif isinstance(value, bytes):
            content_type, data = DEFAULT_IMAGE_TYPE, value
        else:
            content_type, data = DEFAULT_IMAGE_TYPE, value.encode('utf-8')

        if not data:
            return None
        try:
            return await self.blob_store.put(content_type, data)
        except StorageFailure as e:
            raise BadRequest(BAD_IMAGE) from e
