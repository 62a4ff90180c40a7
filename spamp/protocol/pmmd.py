"""
Client for the pmmd wave-stack signal daemon.

pmmd runs alongside spamp and publishes a stack of four periodic waves.
The protocol is one bare token per request and one line per reply:

    -> now          sample the waves right away
    -> beat         block until the next beat, then sample
    <- 0.12 0.5 0.98 0.3

pmmd does not send unsolicited lines, so the first line after a request
is its reply. An expired `timeout=` closes the connection, since a late
reply would otherwise answer the next request.
"""

import asyncio
import logging
import math
from enum import Enum
from typing import NamedTuple

from spamp.protocol.channel import LineChannel
from spamp.protocol.errors import ParseError

logger = logging.getLogger(__name__)

DEFAULT_PMMD_SOCKET = "/tmp/valdefars_pmmd_sock"

SAMPLE_FIELDS = 4


class SampleRequest(Enum):
    """Request tokens understood by pmmd."""

    NOW = "now"
    BEAT = "beat"


class SignalSample(NamedTuple):
    """One reading of the four waves."""

    w0: float
    w1: float
    w2: float
    w3: float


def parse_sample(line: str) -> SignalSample:
    """
    Parse a pmmd reply line.

    Args:
        line: Whitespace-separated decimal numbers.

    Returns:
        The parsed sample.

    Raises:
        ParseError: If the line does not hold exactly four finite numbers.
    """
    fields = line.split()
    if len(fields) != SAMPLE_FIELDS:
        raise ParseError(f"Expected {SAMPLE_FIELDS} wave values, got {len(fields)}: {line!r}")
    try:
        values = [float(f) for f in fields]
    except ValueError:
        raise ParseError(f"Non-numeric wave value in {line!r}") from None
    if not all(math.isfinite(v) for v in values):
        raise ParseError(f"Non-finite wave value in {line!r}")
    return SignalSample(*values)


class PmmdClient:
    """Request/response client for one pmmd connection."""

    def __init__(self, channel: LineChannel) -> None:
        self.channel = channel

    @classmethod
    async def connect(cls, socket_path: str = DEFAULT_PMMD_SOCKET) -> "PmmdClient":
        """Connect to pmmd's socket."""
        return cls(await LineChannel.connect(socket_path))

    async def sample(
        self,
        request: SampleRequest | str = SampleRequest.NOW,
        *,
        timeout: float | None = None,
    ) -> SignalSample:
        """
        Request one sample.

        Args:
            request: SampleRequest or a raw token to send.
            timeout: Optional deadline in seconds.

        Raises:
            WriteError, ReadError: On connection failures.
            ParseError: If the reply is malformed.
            TimeoutError: If `timeout` expired. The channel is closed.
        """
        token = request.value if isinstance(request, SampleRequest) else request
        try:
            line = await asyncio.wait_for(self._request(token), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("No sample from %s within %ss, closing", self.channel.endpoint, timeout)
            await self.channel.close()
            raise
        sample = parse_sample(line)
        logger.debug("Sample (%s): %s", token, sample)
        return sample

    async def _request(self, token: str) -> str:
        await self.channel.write_line(token)
        return await self.channel.read_line()

    async def now(self) -> SignalSample:
        return await self.sample(SampleRequest.NOW)

    async def on_beat(self) -> SignalSample:
        return await self.sample(SampleRequest.BEAT)

    async def close(self) -> None:
        await self.channel.close()

    async def __aenter__(self) -> "PmmdClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
