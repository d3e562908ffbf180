"""Models for the blog app.

Blob - immutable binary content (uploaded images, fetched avatars) keyed by a UUIDv7
Post - one submitted post; avatar_ref/image_ref hold Blob ids without a foreign key
"""
from tortoise import fields, models


class Blob(models.Model):
    # id is generated by BlobStore, never by the database
    id = fields.UUIDField(pk=True)
    content = fields.BinaryField()
    content_type = fields.TextField()

    class Meta:
        default_connection = "default"
        table = "files"


class Post(models.Model):
    """A post row. The surrogate key gives the listing order."""
    id = fields.IntField(pk=True)
    username = fields.TextField()
    avatar_ref = fields.UUIDField(null=True)
    # YYYY-MM-DDTHH:MM:SSZ, UTC
    date = fields.CharField(max_length=20)
    content = fields.TextField()
    image_ref = fields.UUIDField(null=True)

    class Meta:
        default_connection = "default"
        table = "posts"
