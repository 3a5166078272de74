import hashlib
import os
import unittest
from datetime import datetime

from swiftclient.exceptions import ClientException

SWIFT_TEST = unittest.skipIf(
    not os.environ.get("CLOUDFILES_CONTAINER"),
    "Cloud Files credentials not configured (set CLOUDFILES_CONTAINER and friends)")

LAST_MODIFIED = datetime(2015, 10, 21, 7, 28, 0)


def not_found(what):
    return ClientException("%s not found" % what, http_status=404, http_reason="Not Found")


class FakeConnection(object):
    """
    In-memory stand-in for ``swiftclient.client.Connection``.

    ``failures`` maps a method name to an exception raised on every call.
    ``range_limit`` caps how many bytes a ranged GET returns; ``ignore_range``
    makes it answer with the whole object.
    """

    def __init__(self, url="https://storage.example.com/v1/AUTH_test"):
        self.url = url
        self.containers = {}
        self.container_headers = {}
        self.failures = {}
        self.range_limit = None
        self.ignore_range = False
        self.ranges = []

    def _check(self, method):
        exc = self.failures.get(method)
        if exc is not None:
            raise exc

    def _container(self, name):
        if name not in self.containers:
            raise not_found("Container %s" % name)
        return self.containers[name]

    def _object(self, container, name):
        objects = self._container(container)
        if name not in objects:
            raise not_found("Object %s/%s" % (container, name))
        return objects[name]

    def add_object(self, container, name, data, content_type="application/octet-stream",
                   last_modified=LAST_MODIFIED):
        self.containers.setdefault(container, {})[name] = {
            "data": data,
            "content_type": content_type,
            "last_modified": last_modified,
        }

    def get_auth(self):
        return self.url, "token"

    def get_account(self, full_listing=False):
        self._check("get_account")
        listing = []
        for name in sorted(self.containers):
            objects = self.containers[name]
            listing.append({
                "name": name,
                "count": len(objects),
                "bytes": sum(len(o["data"]) for o in objects.values()),
            })
        return {}, listing

    def head_container(self, container):
        self._check("head_container")
        objects = self._container(container)
        return {
            "x-container-object-count": str(len(objects)),
            "x-container-bytes-used": str(sum(len(o["data"]) for o in objects.values())),
        }

    def put_container(self, container, headers=None):
        self._check("put_container")
        self.containers.setdefault(container, {})
        self.container_headers.setdefault(container, {}).update(headers or {})

    def post_container(self, container, headers):
        self._check("post_container")
        self._container(container)
        self.container_headers.setdefault(container, {}).update(headers)

    def delete_container(self, container):
        self._check("delete_container")
        if self._container(container):
            raise ClientException("Container DELETE failed", http_status=409, http_reason="Conflict")
        del self.containers[container]

    def get_container(self, container, prefix=None, delimiter=None, full_listing=False):
        self._check("get_container")
        objects = self._container(container)
        prefix = prefix or ""
        listing = []
        subdirs = set()
        for name in sorted(objects):
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix):]
            if delimiter and delimiter in rest:
                subdir = prefix + rest[:rest.index(delimiter) + 1]
                if subdir not in subdirs:
                    subdirs.add(subdir)
                    listing.append({"subdir": subdir})
                continue
            obj = objects[name]
            listing.append({
                "name": name,
                "bytes": len(obj["data"]),
                "content_type": obj["content_type"],
                "last_modified": obj["last_modified"].strftime("%Y-%m-%dT%H:%M:%S.%f"),
                "hash": hashlib.md5(obj["data"]).hexdigest(),
            })
        return {}, listing

    def head_object(self, container, name):
        self._check("head_object")
        obj = self._object(container, name)
        return {
            "content-type": obj["content_type"],
            "content-length": str(len(obj["data"])),
            "last-modified": obj["last_modified"].strftime("%a, %d %b %Y %H:%M:%S GMT"),
            "etag": hashlib.md5(obj["data"]).hexdigest(),
        }

    def get_object(self, container, name, headers=None):
        self._check("get_object")
        data = self._object(container, name)["data"]
        range_header = (headers or {}).get("Range")
        if range_header is None:
            return {}, data
        self.ranges.append(range_header)
        if self.ignore_range:
            return {}, data
        start, end = [int(x) for x in range_header[len("bytes="):].split("-")]
        stop = end + 1
        if self.range_limit is not None:
            stop = min(stop, start + self.range_limit)
        return {"content-range": "bytes %d-%d/%d" % (start, end, len(data))}, data[start:stop]

    def put_object(self, container, name, contents=None, content_type=None):
        self._check("put_object")
        self._container(container)
        if hasattr(contents, "read"):
            contents = contents.read()
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        self.add_object(container, name, contents or b"",
                        content_type=content_type or "application/octet-stream")

    def copy_object(self, container, obj, destination=None, headers=None):
        self._check("copy_object")
        source = self._object(container, obj)
        dest_container, dest_name = destination.lstrip("/").split("/", 1)
        self._container(dest_container)
        self.add_object(dest_container, dest_name, source["data"], source["content_type"])

    def delete_object(self, container, obj):
        self._check("delete_object")
        self._object(container, obj)
        del self.containers[container][obj]
