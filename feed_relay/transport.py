"""Deadline-bounded reading of streamed HTTP responses."""

import time

import requests
from urllib3.exceptions import DecodeError, ProtocolError, ReadTimeoutError

from .errors import TickTimeoutError

CHUNK_SIZE = 8192


def read_body(
    response: requests.Response,
    deadline: float | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> bytes:
    """
    Read the body of a response opened with ``stream=True``.

    The request timeout only bounds the wait between socket reads, so a server
    trickling bytes could hold a read open indefinitely. With a deadline (on
    the ``time.monotonic`` scale) the body is read one socket read at a time
    and abandoned once the deadline passes.

    Raises:
        TickTimeoutError: If the deadline passes before the body is complete
        requests.RequestException: If the connection fails mid-body
    """
    if deadline is None:
        return response.content

    chunks = []
    try:
        while True:
            if time.monotonic() >= deadline:
                raise TickTimeoutError(
                    f"Deadline passed while reading response from {response.url}"
                )
            chunk = response.raw.read1(chunk_size, decode_content=True)
            if not chunk:
                break
            chunks.append(chunk)
    except ProtocolError as e:
        raise requests.exceptions.ChunkedEncodingError(e) from e
    except ReadTimeoutError as e:
        raise requests.exceptions.ConnectionError(e) from e
    except DecodeError as e:
        raise requests.exceptions.ContentDecodingError(e) from e
    finally:
        response.close()

    return b"".join(chunks)
