"""Custom transfer protocol messages (line-delimited JSON) and the response writer."""

import logging
from datetime import datetime
from typing import Dict, Literal, Optional, TextIO, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common.exceptions import ProtocolDecodeError

logger = logging.getLogger(__name__)


class Action(BaseModel):
    """Remote action descriptor; carried for protocol compatibility only."""
    href: str = ""
    header: Optional[Dict[str, str]] = None
    expires_at: Optional[datetime] = None


class TransferError(BaseModel):
    """Error embedded in an init or completion response."""
    code: int
    message: str


class Request(BaseModel):
    """One decoded input line. Every field is optional, unknown keys are ignored."""
    model_config = ConfigDict(extra='ignore')

    event: str = ""
    operation: str = ""
    concurrent: bool = False
    concurrenttransfers: int = 0
    oid: str = ""
    size: int = 0
    path: str = ""
    action: Optional[Action] = None


class InitResponse(BaseModel):
    """Reply to the init event: `{}` or `{"error": {...}}`."""
    error: Optional[TransferError] = None


class TransferResponse(BaseModel):
    """Completion of one transfer; path is only set for downloads."""
    event: Literal["complete"] = "complete"
    oid: str
    path: Optional[str] = None
    error: Optional[TransferError] = None


class ProgressResponse(BaseModel):
    """Progress update sent after each copied block."""
    model_config = ConfigDict(populate_by_name=True)

    event: Literal["progress"] = "progress"
    oid: str
    bytes_so_far: int = Field(alias="bytesSoFar")
    bytes_since_last: int = Field(alias="bytesSinceLast")


Response = Union[InitResponse, TransferResponse, ProgressResponse]


def decode_request(line: Union[str, bytes]) -> Request:
    """
    Decode one input line into a Request.

    Args:
        line: Raw line read from the peer, text or undecoded bytes (trailing newline allowed)

    Returns:
        Decoded Request

    Raises:
        ProtocolDecodeError: If the line is not a JSON object of the expected shape
    """
    try:
        return Request.model_validate_json(line)
    except ValidationError as e:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="backslashreplace")
        raise ProtocolDecodeError(f"Unable to parse request: {line.rstrip()}") from e


def encode_message(message: Response) -> str:
    """Serialize a response as one compact JSON line, omitting absent fields."""
    return message.model_dump_json(by_alias=True, exclude_none=True) + "\n"


class ResponseWriter:
    """
    Writes responses to the peer, one flushed JSON line per message.

    Write failures are logged rather than raised: once the peer's pipe is
    gone there is nobody left to report to.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream

    def send(self, message: Response) -> bool:
        """
        Write and flush a single message.

        Returns:
            True if the message was written, False otherwise
        """
        line = encode_message(message)
        try:
            self._stream.write(line)
            self._stream.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Unable to send message {line.rstrip()}: {e}")
            return False
        logger.info(f"Sent message {line.rstrip()}")
        return True

    def send_init(self, error: Optional[TransferError] = None) -> bool:
        return self.send(InitResponse(error=error))

    def send_progress(self, oid: str, bytes_so_far: int, bytes_since_last: int) -> bool:
        return self.send(ProgressResponse(
            oid=oid,
            bytes_so_far=bytes_so_far,
            bytes_since_last=bytes_since_last
        ))

    def send_complete(self, oid: str, path: Optional[str] = None) -> bool:
        return self.send(TransferResponse(oid=oid, path=path))

    def send_transfer_error(self, oid: str, code: int, message: str) -> bool:
        return self.send(TransferResponse(
            oid=oid,
            error=TransferError(code=code, message=message)
        ))
