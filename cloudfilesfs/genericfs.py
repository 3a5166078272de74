"""
Generic remote file system interface and the errors raised by its drivers.
"""

import os

from traitlets.config import LoggingConfigurable


class GenericFSError(Exception):
    pass


class NoSuchFile(GenericFSError):

    def __init__(self, path, message=None):
        self.path = path
        super(NoSuchFile, self).__init__(message or "No such file or directory: %s" % path)


class BadRequest(GenericFSError):
    pass


class ConfigurationError(GenericFSError):
    pass


class TransportFailure(GenericFSError):

    def __init__(self, message, bytes_delivered=0):
        self.bytes_delivered = bytes_delivered
        super(TransportFailure, self).__init__(message)


class StreamCancelled(GenericFSError):

    def __init__(self, message, bytes_delivered=0):
        self.bytes_delivered = bytes_delivered
        super(StreamCancelled, self).__init__(message)


class GenericFS(LoggingConfigurable):
    """
    Containers hold blobs; a driver may be bound to a single container.

    Traits tagged with ``env`` fall back to that environment variable when
    they are neither passed in nor set through the traitlets config.
    """

    def __init__(self, **kwargs):
        super(GenericFS, self).__init__(**kwargs)
        for name, trait in self.traits(config=True, env=lambda env: env is not None).items():
            if name in kwargs or self._has_config_value(name):
                continue
            value = os.environ.get(trait.metadata["env"])
            if value is not None:
                setattr(self, name, trait.from_string(value))

    def _has_config_value(self, name):
        for cls in type(self).__mro__:
            section = self.config.get(cls.__name__)
            if section is not None and name in section:
                return True
        return False

    def list_containers(self, include_properties=False):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def get_container(self, container, include_files=True, include_folders=True, full_tree=False):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def get_container_properties(self, container):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def container_exists(self, container):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def create_container(self, properties, metadata=None):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def update_container_properties(self, container, properties=None):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def delete_container(self, container, force=False):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def blob_exists(self, container, name):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def put_blob_data(self, container, name, blob, type=""):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def put_blob_from_file(self, container, name, local_file_name, type=""):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def copy_blob(self, container, name, src_container, src_name, properties=None):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def get_blob_as_file(self, container, name, local_file_name):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def get_blob_data(self, container, name):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def delete_blob(self, container, name, no_check=False):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def list_blobs(self, container, prefix="", delimiter=""):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def get_blob_properties(self, container, name):
        raise NotImplementedError("Should be implemented by the file system abstraction")

    def stream_blob(self, container, name, sink, params=None, cancel=None, timeout=None):
        raise NotImplementedError("Should be implemented by the file system abstraction")
