from cloudfilesfs.genericfs import (
    BadRequest, ConfigurationError, GenericFS, GenericFSError, NoSuchFile, StreamCancelled,
    TransportFailure)
from cloudfilesfs.client import BlobHandle, CloudFilesClient, ContainerHandle
from cloudfilesfs.cloudfiles_fs import CloudFilesFS
from cloudfilesfs.configstore import ServiceConfigStore
from cloudfilesfs.credentials import OpenStackCredentials, RackspaceCredentials, resolve_credentials
from cloudfilesfs.sinks import BufferedSink, FileSink, OutputSink
from cloudfilesfs.streamer import RangedBlobStreamer, StreamSession, TransferRequest

__version__ = "0.1.0"
