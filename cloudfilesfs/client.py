"""
Object storage client over a swiftclient connection.
"""

import functools
import logging
from collections import namedtuple

from six.moves.urllib.parse import quote
from swiftclient.client import Connection
from swiftclient.exceptions import ClientException

from cloudfilesfs.genericfs import NoSuchFile


logger = logging.getLogger(__name__)

BlobHandle = namedtuple(
    "BlobHandle", ["container", "name", "content_type", "content_length", "last_modified", "url"])

ContainerHandle = namedtuple("ContainerHandle", ["name", "object_count", "bytes_used"])


def is_not_found(exc):
    return isinstance(exc, ClientException) and exc.http_status == 404


def _target_path(args):
    if args and isinstance(args[0], BlobHandle):
        return "%s/%s" % (args[0].container, args[0].name)
    return "/".join(a for a in args[:2] if isinstance(a, str))


def translate_not_found(func):
    """Raise NoSuchFile for a 404 from the store, log and re-raise anything else."""
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except ClientException as e:
            if is_not_found(e):
                raise NoSuchFile(_target_path(args), str(e)) from e
            logger.error(str(e))
            raise
    return wrapper


class CloudFilesClient(object):

    def __init__(self, connection):
        self.conn = connection

    @classmethod
    def from_credentials(cls, credentials, **kwargs):
        options = credentials.connection_options()
        options.update(kwargs)
        return cls(Connection(**options))

    @property
    def storage_url(self):
        if not self.conn.url:
            self.conn.get_auth()
        return self.conn.url

    def object_url(self, container, name):
        return "%s/%s/%s" % (self.storage_url.rstrip("/"), quote(container), quote(name))

    def resolve_container(self, name):
        try:
            headers = self.conn.head_container(name)
        except ClientException as e:
            if is_not_found(e):
                raise NoSuchFile(name, "No container named '%s'" % name) from e
            logger.error(str(e))
            raise
        return ContainerHandle(
            name=name,
            object_count=int(headers.get("x-container-object-count", 0)),
            bytes_used=int(headers.get("x-container-bytes-used", 0)),
        )

    def resolve_blob(self, container, name):
        try:
            headers = self.conn.head_object(container, name)
        except ClientException as e:
            if is_not_found(e):
                raise NoSuchFile(name, "Object '%s' not found in container '%s'" % (name, container)) from e
            logger.error(str(e))
            raise
        return BlobHandle(
            container=container,
            name=name,
            content_type=headers.get("content-type", ""),
            content_length=int(headers.get("content-length", 0)),
            last_modified=headers.get("last-modified", ""),
            url=self.object_url(container, name),
        )

    @translate_not_found
    def ranged_fetch(self, blob, start, end):
        """
        Fetch bytes ``start`` through ``end`` (inclusive) of a blob. The store
        may return fewer bytes than asked for.
        """
        headers = {"Range": "bytes=%d-%d" % (start, end)}
        return self.conn.get_object(blob.container, blob.name, headers=headers)[1]

    @translate_not_found
    def list_containers(self):
        return self.conn.get_account(full_listing=True)[1]

    @translate_not_found
    def create_container(self, name, headers=None):
        self.conn.put_container(name, headers=headers)

    @translate_not_found
    def update_container(self, name, headers=None):
        self.conn.post_container(name, headers or {})

    @translate_not_found
    def delete_container(self, name):
        self.conn.delete_container(name)

    @translate_not_found
    def list_objects(self, container, prefix=None, delimiter=None):
        return self.conn.get_container(
            container, prefix=prefix or None, delimiter=delimiter or None, full_listing=True)[1]

    @translate_not_found
    def put_object(self, container, name, contents, content_type=None):
        self.conn.put_object(container, name, contents=contents, content_type=content_type)

    @translate_not_found
    def copy_object(self, src_container, src_name, container, name, headers=None):
        destination = "/%s/%s" % (container, name)
        self.conn.copy_object(src_container, src_name, destination=destination, headers=headers)

    @translate_not_found
    def get_object(self, container, name):
        return self.conn.get_object(container, name)[1]

    @translate_not_found
    def delete_object(self, container, name):
        self.conn.delete_object(container, name)
