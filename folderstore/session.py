"""Protocol loop: reads requests line by line and dispatches them."""

import logging
from typing import BinaryIO, Callable, Dict, TextIO, Union

from common.constants import ERR_BASEDIR_NOT_SPECIFIED
from common.exceptions import ProtocolDecodeError
from common.protocol import Request, ResponseWriter, TransferError, decode_request
from folderstore.config import AdapterConfig
from folderstore.transfers import retrieve, store

logger = logging.getLogger(__name__)

EVENT_INIT = "init"
EVENT_DOWNLOAD = "download"
EVENT_UPLOAD = "upload"
EVENT_TERMINATE = "terminate"


class AdapterSession:
    """
    One custom-transfer session bound to an input and an output stream.

    Requests are handled strictly one after another: every progress and
    completion message for a request is written before the next line is read.
    """

    def __init__(self, config: AdapterConfig, stdin: Union[BinaryIO, TextIO], stdout: TextIO):
        """
        Initialize the session.

        Args:
            config: Adapter configuration; an empty base_dir is reported on init
            stdin: Stream of request lines from git-lfs; a binary stream lets
                lines that are not valid UTF-8 be skipped one at a time
            stdout: Stream that receives response lines
        """
        self.config = config
        self._stdin = stdin
        self.responder = ResponseWriter(stdout)
        self._handlers: Dict[str, Callable[[Request], None]] = {
            EVENT_INIT: self._handle_init,
            EVENT_DOWNLOAD: self._handle_download,
            EVENT_UPLOAD: self._handle_upload,
        }

    def run(self) -> None:
        """Process requests until a terminate event or end of input."""
        for line in self._stdin:
            try:
                request = decode_request(line)
            except ProtocolDecodeError as e:
                logger.warning(str(e))
                continue

            if request.event == EVENT_TERMINATE:
                logger.info("Terminating custom adapter gracefully")
                return

            handler = self._handlers.get(request.event)
            if handler is None:
                logger.warning(f"Ignoring unknown event {request.event!r}")
                continue
            handler(request)

        logger.info("End of input, session closed")

    def _handle_init(self, request: Request) -> None:
        if not self.config.base_dir:
            self.responder.send_init(TransferError(
                code=ERR_BASEDIR_NOT_SPECIFIED,
                message="Base directory not specified, check config"
            ))
            return

        logger.info(f"Initialised lfs-folderstore custom adapter for {request.operation}")
        self.responder.send_init()

    def _handle_download(self, request: Request) -> None:
        logger.info(f"Received download request for {request.oid}")
        retrieve(self.config, request.oid, request.size, self.responder)

    def _handle_upload(self, request: Request) -> None:
        logger.info(f"Received upload request for {request.oid}")
        store(self.config, request.oid, request.size, request.path, self.responder)


def serve(config: AdapterConfig, stdin: Union[BinaryIO, TextIO], stdout: TextIO) -> None:
    """
    Run one protocol session over the given streams.

    Args:
        config: Adapter configuration
        stdin: Request stream
        stdout: Response stream
    """
    AdapterSession(config, stdin, stdout).run()
