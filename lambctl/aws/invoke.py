from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TextIO

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


class PayloadDecodeError(ValueError):
    pass


@dataclass
class InvokeOptions:
    async_: bool = False
    log_tail: bool = False
    qualifier: Optional[str] = None


def iter_payloads(stream: TextIO) -> Iterator[object]:
    """
    Yield JSON values from a text stream one at a time.
    Values may be concatenated or separated by whitespace; the stream is
    read line by line so payloads typed into a terminal are sent right away.
    A malformed value is reported as soon as it is read.
    """
    buf = ""
    for line in stream:
        buf += line
        while True:
            buf = buf.lstrip()
            if not buf:
                break
            try:
                value, end = _decoder.raw_decode(buf)
            except json.JSONDecodeError as e:
                if e.pos < len(buf.rstrip()):
                    raise PayloadDecodeError(f"failed to decode payload as JSON: {e}") from e
                # value continues on the next line
                break
            yield value
            buf = buf[end:]
    if buf:
        try:
            _decoder.raw_decode(buf)
        except json.JSONDecodeError as e:
            raise PayloadDecodeError(f"failed to decode payload as JSON: {e}") from e
        raise PayloadDecodeError(f"failed to decode payload as JSON: {buf[:40]!r}")


def invoke(
    client,
    function_name: str,
    payloads: Iterable[object],
    options: InvokeOptions,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    invocation_type = "Event" if options.async_ else "RequestResponse"
    ok = 0
    for payload in payloads:
        params = {
            "FunctionName": function_name,
            "InvocationType": invocation_type,
            "Payload": json.dumps(payload).encode("utf-8"),
        }
        if options.log_tail:
            params["LogType"] = "Tail"
        if options.qualifier:
            params["Qualifier"] = options.qualifier

        logger.debug(f"invoking function {params}")
        try:
            res = client.invoke(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"failed to invoke function: {e}")
            continue

        body = res.get("Payload")
        if body is not None:
            data = body.read() if hasattr(body, "read") else body
            stdout.write(data.decode("utf-8") if isinstance(data, bytes) else data)
        stdout.write("\n")
        stdout.flush()

        logger.info(f"StatusCode:{res.get('StatusCode')}")
        if res.get("ExecutedVersion"):
            logger.info(f"ExecutionVersion:{res['ExecutedVersion']}")
        if res.get("FunctionError"):
            logger.warning(f"FunctionError:{res['FunctionError']}")
        if res.get("LogResult"):
            stderr.write(base64.b64decode(res["LogResult"]).decode("utf-8", errors="replace"))
            stderr.flush()
        ok += 1
    return ok
