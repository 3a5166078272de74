"""
Chunked streaming download of a blob through ranged fetches.
"""

import logging
import time
from collections import namedtuple

from cloudfilesfs.genericfs import (
    ConfigurationError, NoSuchFile, StreamCancelled, TransportFailure)


logger = logging.getLogger(__name__)

DEFAULT_DISPOSITION = "inline"
STREAM_ERROR_PREFIX = "Failed to stream blob: "

TransferRequest = namedtuple("TransferRequest", ["container_name", "blob_name", "disposition"])
TransferRequest.__new__.__defaults__ = (None,)


class StreamSession(object):

    def __init__(self, chunk_size):
        self.chunk_size = chunk_size
        self.bytes_delivered = 0
        self.chunks = 0
        self.headers_sent = False
        self.not_found = None

    @property
    def found(self):
        return self.not_found is None


def content_disposition(disposition, filename):
    return '%s; filename="%s";' % (disposition or DEFAULT_DISPOSITION, filename)


class RangedBlobStreamer(object):
    """
    Streams one blob to an output sink, ``chunk_size`` bytes per request.

    The streamer keeps no per-transfer state, so one instance may serve
    concurrent requests.
    """

    def __init__(self, chunk_size):
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ValueError("chunk_size must be a positive integer, got %r" % (chunk_size,))
        self.chunk_size = chunk_size

    def stream(self, client, container_name, blob_name, sink, disposition=None,
               cancel=None, timeout=None):
        """
        Write ``blob_name`` from ``container_name`` to ``sink``.

        Returns the finished :class:`StreamSession`. A missing blob is not an
        error: a 404 response is written to the sink instead and the session's
        ``not_found`` holds the message.

        :param cancel: object with an ``is_set()`` method, checked between chunks
        :param timeout: seconds allowed for the whole transfer
        """
        session = StreamSession(self.chunk_size)
        deadline = time.monotonic() + timeout if timeout is not None else None

        try:
            client.resolve_container(container_name)
        except NoSuchFile as e:
            raise ConfigurationError(STREAM_ERROR_PREFIX + str(e)) from e
        except Exception as e:
            raise TransportFailure(STREAM_ERROR_PREFIX + str(e)) from e

        try:
            blob = client.resolve_blob(container_name, blob_name)
        except NoSuchFile as e:
            logger.debug("stream: %s/%s not found", container_name, blob_name)
            self.send_not_found(sink, blob_name, e)
            session.not_found = str(e)
            return session
        except Exception as e:
            raise TransportFailure(STREAM_ERROR_PREFIX + str(e)) from e

        self.send_headers(sink, blob, content_disposition(disposition, blob_name))
        session.headers_sent = True
        sink.clear()

        size = blob.content_length
        while session.bytes_delivered < size:
            self.check_cancelled(session, cancel, deadline)
            start = session.bytes_delivered
            end = min(start + self.chunk_size, size) - 1
            try:
                data = client.ranged_fetch(blob, start, end)
            except Exception as e:
                logger.error("stream: %s/%s failed at byte %d: %s", container_name, blob_name, start, e)
                raise TransportFailure(STREAM_ERROR_PREFIX + str(e), session.bytes_delivered) from e

            length = len(data)
            if length == 0:
                raise TransportFailure(
                    STREAM_ERROR_PREFIX + "no data returned for bytes %d-%d of '%s'" % (start, end, blob_name),
                    session.bytes_delivered)
            if length > end - start + 1:
                raise TransportFailure(
                    STREAM_ERROR_PREFIX + "got %d bytes for the %d byte range %d-%d of '%s'" % (
                        length, end - start + 1, start, end, blob_name),
                    session.bytes_delivered)
            session.bytes_delivered += length
            sink.write(data)
            sink.flush()
            session.chunks += 1

        if session.chunks == 0:
            sink.flush()

        logger.debug("stream: %s/%s sent %d bytes in %d chunks",
                     container_name, blob_name, session.bytes_delivered, session.chunks)
        return session

    def stream_request(self, client, request, sink, cancel=None, timeout=None):
        return self.stream(client, request.container_name, request.blob_name, sink,
                           disposition=request.disposition, cancel=cancel, timeout=timeout)

    @staticmethod
    def send_headers(sink, blob, disposition):
        sink.set_header("Last-Modified", blob.last_modified)
        sink.set_header("Content-Type", blob.content_type)
        sink.set_header("Content-Length", blob.content_length)
        sink.set_header("Content-Disposition", disposition)

    @staticmethod
    def send_not_found(sink, blob_name, error):
        sink.set_status(404, "Not Found")
        sink.set_header("Content-Type", "text/html")
        sink.clear()
        sink.write("Failed to stream/download file. File %s was not found. %s" % (blob_name, error))
        sink.flush()

    @staticmethod
    def check_cancelled(session, cancel, deadline):
        if cancel is not None and cancel.is_set():
            raise StreamCancelled(STREAM_ERROR_PREFIX + "transfer cancelled", session.bytes_delivered)
        if deadline is not None and time.monotonic() >= deadline:
            raise StreamCancelled(STREAM_ERROR_PREFIX + "transfer timed out", session.bytes_delivered)
