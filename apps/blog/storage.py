from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

import structlog
from pydantic import ValidationError
from tortoise import connections
from tortoise.exceptions import BaseORMException, DoesNotExist
from uuid6 import uuid7

from apps.blog.exceptions import NotFound, StorageFailure
from apps.blog.models import Blob, Post
from apps.blog.schema import PostOut

logger = structlog.get_logger()

DATE_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


class BlobStore:
    """Create-once, read-many binary storage in the ``files`` table."""

    def __init__(self, connection_name: str = 'default'):
        self.connection_name = connection_name

    def _db(self):
        return connections.get(self.connection_name)

    async def put(self, content_type: str, content: bytes) -> UUID:
        if not content:
            raise ValueError('blob content must not be empty')
        blob_id = uuid7()
        try:
            await Blob.create(id=blob_id, content_type=content_type, content=bytes(content),
                              using_db=self._db())
        except BaseORMException as e:
            logger.error('blob_write_failed', blob_id=str(blob_id), error=str(e))
            raise StorageFailure(f'could not store blob {blob_id}') from e
        logger.debug('blob_stored', blob_id=str(blob_id), content_type=content_type, size=len(content))
        return blob_id

    async def get(self, blob_id: UUID) -> Tuple[str, bytes]:
        try:
            blob = await Blob.get(id=blob_id, using_db=self._db())
        except DoesNotExist as e:
            raise NotFound(f'no blob {blob_id}') from e
        except BaseORMException as e:
            raise StorageFailure(f'could not read blob {blob_id}') from e
        return blob.content_type, bytes(blob.content)


class PostRepository:
    """Append-only post records, listed in insertion order."""

    def __init__(self, connection_name: str = 'default'):
        self.connection_name = connection_name

    def _db(self):
        return connections.get(self.connection_name)

    async def insert(self,
                     username: str,
                     avatar_ref: Optional[UUID],
                     content: str,
                     image_ref: Optional[UUID]) -> None:
        if not username or not content:
            raise ValueError('username and content must not be empty')
        date = datetime.now(timezone.utc).strftime(DATE_FORMAT)
        try:
            post = await Post.create(username=username, avatar_ref=avatar_ref, date=date,
                                     content=content, image_ref=image_ref, using_db=self._db())
        except BaseORMException as e:
            logger.error('post_write_failed', error=str(e))
            raise StorageFailure('could not store post') from e
        logger.info('post_stored', post_id=post.id, username=username)

    async def list_all(self) -> List[PostOut]:
        # a failed read shows an empty page instead of an error
        try:
            rows = await Post.all(using_db=self._db()).order_by('id')
            return [PostOut.model_validate(row) for row in rows]
        except (BaseORMException, ValidationError) as e:
            logger.error('post_list_failed', error=str(e))
            return []
