from datetime import datetime

from traitlets import Integer, Unicode, observe

from cloudfilesfs.client import CloudFilesClient
from cloudfilesfs.credentials import resolve_credentials
from cloudfilesfs.genericfs import BadRequest, GenericFS, GenericFSError, NoSuchFile
from cloudfilesfs.streamer import RangedBlobStreamer

HTTP_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"

DEFAULT_CHUNK_SIZE = 10000000


def http_date(value):
    """Swift listings report ISO timestamps in UTC; headers want RFC 1123."""
    if not value:
        return None
    for fmt in ("%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%dT%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).strftime(HTTP_DATE_FORMAT)
        except ValueError:
            continue
    return value


def container_meta_headers(metadata):
    return dict(("X-Container-Meta-%s" % key, str(value)) for key, value in (metadata or {}).items())


class CloudFilesFS(GenericFS):

    username = Unicode(
        "", help="Object Store Username").tag(
            config=True, env="CLOUDFILES_USERNAME")

    password = Unicode(
        "", help="OpenStack Password, used when no API key is given").tag(
            config=True, env="CLOUDFILES_PASSWORD")

    api_key = Unicode(
        "", help="Rackspace API Key").tag(
            config=True, env="CLOUDFILES_API_KEY")

    tenant_name = Unicode(
        "", help="OpenStack Tenant Name").tag(
            config=True, env="CLOUDFILES_TENANT_NAME")

    url = Unicode(
        "", help="Identity (authentication) URL").tag(
            config=True, env="CLOUDFILES_AUTH_URL")

    region = Unicode(
        "", help="Object Store Region").tag(
            config=True, env="CLOUDFILES_REGION")

    container = Unicode(
        "", help="Container the service is bound to, created on start if missing").tag(
            config=True, env="CLOUDFILES_CONTAINER")

    chunk_size = Integer(
        DEFAULT_CHUNK_SIZE, help="Bytes requested per ranged fetch when streaming a blob").tag(
            config=True, env="CLOUDFILES_CHUNK_SIZE")

    delimiter = "/"

    def __init__(self, log=None, connection=None, **kwargs):
        super(CloudFilesFS, self).__init__(**kwargs)
        if log is not None:
            self.log = log
        self.client = None
        self.credentials = None
        self.streamer = RangedBlobStreamer(self.chunk_size)

        if connection is None:
            self.credentials = resolve_credentials({
                "username": self.username,
                "password": self.password,
                "api_key": self.api_key,
                "tenant_name": self.tenant_name,
                "url": self.url,
                "region": self.region,
            })

        try:
            if connection is None:
                self.client = CloudFilesClient.from_credentials(self.credentials)
            else:
                self.client = CloudFilesClient(connection)
            self.log.debug("CloudFilesFS: init")
            self.init()
        except Exception as e:
            self.client = None
            raise GenericFSError("Failed to launch OpenStack service: %s" % e) from e

    @observe("chunk_size")
    def _chunk_size_changed(self, change):
        self.streamer = RangedBlobStreamer(change["new"])

    @classmethod
    def from_service_config(cls, store, service_id, **kwargs):
        config = store.get_config(service_id)
        settings = dict((k, v) for k, v in config.items()
                        if v is not None and cls.class_traits(config=True).get(k) is not None)
        settings.update(kwargs)
        return cls(**settings)

    def init(self):
        if self.container and not self.container_exists(self.container):
            self.create_container({"name": self.container})

    def check_connection(self):
        if self.client is None:
            raise GenericFSError("No valid connection to blob file storage.")

    def list_resource(self, include_properties=False):
        out = []
        for item in self.list_blobs(self.container, delimiter=self.delimiter):
            entry = {"name": item["name"].rstrip(self.delimiter), "path": item["name"]}
            if include_properties:
                entry.update(item)
                entry["name"] = entry["path"].rstrip(self.delimiter)
            out.append(entry)
        return out

    def list_containers(self, include_properties=False):
        self.check_connection()
        self.log.debug("CloudFilesFS: list_containers")

        if self.container:
            return self.list_resource(include_properties)

        try:
            out = []
            for item in self.client.list_containers():
                name = item["name"].rstrip()
                entry = {"name": name, "path": name}
                if include_properties:
                    entry["size"] = item.get("bytes", 0)
                    entry["count"] = item.get("count", 0)
                out.append(entry)
            return out
        except Exception as e:
            raise GenericFSError("Failed to list containers: %s" % e) from e

    def get_container(self, container, include_files=True, include_folders=True, full_tree=False):
        self.check_connection()
        self.log.debug("CloudFilesFS: get_container: %s" % (container))

        delimiter = "" if full_tree else self.delimiter
        listing = self.list_blobs(container, delimiter=delimiter)

        resources = []
        for item in listing:
            is_folder = item["name"].endswith(self.delimiter)
            if is_folder and not include_folders:
                continue
            if not is_folder and not include_files:
                continue
            resource = {
                "name": item["name"].rstrip(self.delimiter).split(self.delimiter)[-1],
                "path": item["name"],
                "type": "folder" if is_folder else "file",
            }
            if not is_folder:
                resource.update({
                    "content_type": item["content_type"],
                    "content_length": item["content_length"],
                    "last_modified": item["last_modified"],
                })
            resources.append(resource)

        return {"name": container, "path": container, "resource": resources}

    def get_container_properties(self, container):
        self.check_connection()
        self.log.debug("CloudFilesFS: get_container_properties: %s" % (container))

        try:
            handle = self.client.resolve_container(container)
        except NoSuchFile as e:
            raise GenericFSError("Failed to find container: %s" % e) from e
        except Exception as e:
            raise GenericFSError("Failed to get container: %s" % e) from e
        return {"name": container, "size": handle.bytes_used}

    def container_exists(self, container=""):
        self.check_connection()
        self.log.debug("CloudFilesFS: container_exists: %s" % (container))

        try:
            self.client.resolve_container(container)
        except NoSuchFile:
            return False
        except Exception as e:
            raise GenericFSError("Failed to list containers: %s" % e) from e
        return True

    def create_container(self, properties, metadata=None):
        self.check_connection()

        name = properties.get("name", properties.get("path"))
        if not name:
            raise BadRequest("No name found for container in create request.")
        self.log.debug("CloudFilesFS: create_container: %s" % (name))

        try:
            self.client.create_container(name, headers=container_meta_headers(metadata))
        except Exception as e:
            raise GenericFSError("Failed to create container '%s': %s" % (name, e)) from e
        return {"name": name, "path": name}

    def update_container_properties(self, container, properties=None):
        self.check_connection()
        self.log.debug("CloudFilesFS: update_container_properties: %s" % (container))

        try:
            self.client.resolve_container(container)
            self.client.update_container(container, container_meta_headers(properties))
        except Exception as e:
            raise GenericFSError("Failed to update container '%s': %s" % (container, e)) from e

    def delete_container(self, container, force=False):
        self.check_connection()
        self.log.debug("CloudFilesFS: delete_container: %s force=%s" % (container, force))

        try:
            self.client.resolve_container(container)
            if force:
                for item in self.client.list_objects(container):
                    if "name" in item:
                        self.client.delete_object(container, item["name"])
            self.client.delete_container(container)
        except Exception as e:
            raise GenericFSError("Failed to delete container '%s': %s" % (container, e)) from e

    def blob_exists(self, container="", name=""):
        self.check_connection()
        self.log.debug("CloudFilesFS: blob_exists: %s/%s" % (container, name))

        try:
            self.client.resolve_blob(container, name)
        except NoSuchFile:
            return False
        except Exception as e:
            raise GenericFSError("Failed to check blob '%s': %s" % (name, e)) from e
        return True

    def put_blob_data(self, container="", name="", blob=b"", type=""):
        self.check_connection()
        self.log.debug("CloudFilesFS: put_blob_data: %s/%s" % (container, name))

        try:
            self.client.resolve_container(container)
            self.client.put_object(container, name, blob, content_type=type or None)
        except Exception as e:
            raise GenericFSError("Failed to create blob '%s': %s" % (name, e)) from e

    def put_blob_from_file(self, container="", name="", local_file_name="", type=""):
        self.check_connection()
        self.log.debug("CloudFilesFS: put_blob_from_file: %s => %s/%s" % (local_file_name, container, name))

        try:
            self.client.resolve_container(container)
            with open(local_file_name, "rb") as f:
                self.client.put_object(container, name, f, content_type=type or None)
        except Exception as e:
            raise GenericFSError("Failed to create blob '%s': %s" % (name, e)) from e

    def copy_blob(self, container="", name="", src_container="", src_name="", properties=None):
        self.check_connection()
        self.log.debug("CloudFilesFS: copy_blob: %s/%s => %s/%s" % (src_container, src_name, container, name))

        try:
            self.client.resolve_container(src_container)
            self.client.resolve_container(container)
            headers = dict(("X-Object-Meta-%s" % k, str(v)) for k, v in (properties or {}).items())
            self.client.copy_object(src_container, src_name, container, name, headers=headers or None)
        except Exception as e:
            raise GenericFSError("Failed to copy blob '%s': %s" % (name, e)) from e

    def get_blob_as_file(self, container="", name="", local_file_name=""):
        self.check_connection()
        self.log.debug("CloudFilesFS: get_blob_as_file: %s/%s => %s" % (container, name, local_file_name))

        try:
            data = self.client.get_object(container, name)
            with open(local_file_name, "wb") as f:
                f.write(data)
        except Exception as e:
            raise GenericFSError("Failed to retrieve blob '%s': %s" % (name, e)) from e

    def get_blob_data(self, container="", name=""):
        self.check_connection()
        self.log.debug("CloudFilesFS: get_blob_data: %s/%s" % (container, name))

        try:
            return self.client.get_object(container, name)
        except Exception as e:
            raise GenericFSError("Failed to retrieve blob '%s': %s" % (name, e)) from e

    def delete_blob(self, container="", name="", no_check=False):
        self.check_connection()
        self.log.debug("CloudFilesFS: delete_blob: %s/%s" % (container, name))

        try:
            self.client.resolve_container(container)
        except Exception as e:
            raise GenericFSError('Failed to delete blob "%s": %s' % (name, e)) from e

        try:
            self.client.delete_object(container, name)
        except NoSuchFile as e:
            if no_check:
                return
            raise NoSuchFile(name, "File '%s' was not found." % name) from e
        except Exception as e:
            raise GenericFSError('Failed to delete blob "%s": %s' % (name, e)) from e

    def list_blobs(self, container="", prefix="", delimiter=""):
        self.check_connection()
        self.log.debug("CloudFilesFS: list_blobs: %s prefix=%s" % (container, prefix))

        try:
            listing = self.client.list_objects(container, prefix=prefix, delimiter=delimiter)
        except NoSuchFile:
            raise
        except Exception as e:
            raise GenericFSError("Failed to list blobs: %s" % e) from e

        out = []
        for item in listing:
            if item.get("name"):
                if item["name"] == prefix:
                    continue
                out.append({
                    "name": item["name"],
                    "content_type": item.get("content_type"),
                    "content_length": item.get("bytes", 0),
                    "last_modified": http_date(item.get("last_modified")),
                })
            elif item.get("subdir"):
                out.append({
                    "name": item["subdir"],
                    "content_type": None,
                    "content_length": 0,
                    "last_modified": None,
                })

        self.log.debug("CloudFilesFS: list_blobs: %d entries" % len(out))
        return out

    def get_blob_properties(self, container, name):
        self.check_connection()
        self.log.debug("CloudFilesFS: get_blob_properties: %s/%s" % (container, name))

        try:
            blob = self.client.resolve_blob(container, name)
        except Exception as e:
            raise GenericFSError("Failed to list metadata: %s" % e) from e
        return {
            "name": blob.name,
            "content_type": blob.content_type,
            "content_length": blob.content_length,
            "last_modified": blob.last_modified,
        }

    def stream_blob(self, container, name, sink, params=None, cancel=None, timeout=None):
        self.check_connection()
        self.log.debug("CloudFilesFS: stream_blob: %s/%s" % (container, name))

        disposition = (params or {}).get("disposition")
        return self.streamer.stream(self.client, container, name, sink,
                                    disposition=disposition, cancel=cancel, timeout=timeout)
