"""
Output sinks receive a streamed response: an optional status, headers, then
body bytes.

Headers are committed on the first flush. After that ``set_status`` and
``set_header`` raise, since there is no way to take them back.
"""

HTTP_REASONS = {
    200: "OK",
    206: "Partial Content",
    404: "Not Found",
    500: "Internal Server Error",
}


class HeadersAlreadySent(RuntimeError):
    pass


class OutputSink(object):

    def __init__(self):
        self.status = None
        self.headers = []
        self.headers_sent = False
        self._pending = []

    def set_status(self, code, reason=None):
        if self.headers_sent:
            raise HeadersAlreadySent("Cannot set status %s, headers already sent" % code)
        self.status = (code, reason or HTTP_REASONS.get(code, ""))

    def set_header(self, name, value):
        if self.headers_sent:
            raise HeadersAlreadySent("Cannot set header %s, headers already sent" % name)
        self.headers.append((name, str(value)))

    def clear(self):
        """Discard body bytes written but not yet flushed."""
        self._pending = []

    def write(self, data):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._pending.append(data)

    def flush(self):
        if not self.headers_sent:
            self.headers_sent = True
            self.send_headers()
        data = b"".join(self._pending)
        self._pending = []
        if data:
            self.send_body(data)

    def header(self, name):
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    def send_headers(self):
        raise NotImplementedError

    def send_body(self, data):
        raise NotImplementedError


class BufferedSink(OutputSink):
    """Keeps everything in memory. Each flush that carried data is one chunk."""

    def __init__(self):
        super(BufferedSink, self).__init__()
        self.chunks = []

    def send_headers(self):
        pass

    def send_body(self, data):
        self.chunks.append(data)

    @property
    def body(self):
        return b"".join(self.chunks)


class FileSink(OutputSink):
    """
    Writes a CGI style response to a binary file object, e.g.
    ``sys.stdout.buffer``.
    """

    def __init__(self, fileobj):
        super(FileSink, self).__init__()
        self.fileobj = fileobj

    def send_headers(self):
        lines = []
        if self.status is not None:
            lines.append("Status: %d %s" % self.status)
        for name, value in self.headers:
            lines.append("%s: %s" % (name, value))
        # header values outside latin-1 are sent as "?"
        self.fileobj.write(("\r\n".join(lines) + "\r\n\r\n").encode("latin-1", errors="replace"))

    def send_body(self, data):
        self.fileobj.write(data)

    def flush(self):
        super(FileSink, self).flush()
        self.fileobj.flush()
