from __future__ import annotations

import logging
from typing import Optional

from .config import Settings
from .errors import ToolInvocationError
from .models import EligibilityVerdict, ProbeResult
from .probe import probe_file
from .tempfiles import TempFileGuard
from .tools import MediaTools

logger = logging.getLogger(__name__)

ACCEPTED_CODEC = "opus"
ACCEPTED_CHANNELS = 1
ACCEPTED_SAMPLE_RATES = frozenset({16000, 24000, 48000})
MIN_DURATION_SECONDS = 1.0


def is_voice_eligible(info: ProbeResult) -> bool:
    return (
        info.codec_name == ACCEPTED_CODEC
        and info.channels == ACCEPTED_CHANNELS
        and info.sample_rate in ACCEPTED_SAMPLE_RATES
        and info.duration >= MIN_DURATION_SECONDS
    )


async def check_eligibility(
    buffer: bytes,
    settings: Settings,
    *,
    tools: Optional[MediaTools] = None,
) -> EligibilityVerdict:
    """Decide whether ``buffer`` can be sent as a WhatsApp voice message.

    Media that ffprobe rejects yields ``ok=False`` with the tool error attached.
    Missing binaries and temp directory failures still raise.
    """
    tools = tools or MediaTools(settings.tools)
    with TempFileGuard(settings.temp.directory) as guard:
        probe_path = await guard.write_async("probe", ".ogg", buffer)
        try:
            info = await probe_file(probe_path, tools)
        except ToolInvocationError as exc:
            logger.info("Probe rejected buffer [%s]: %s", guard.token, exc)
            return EligibilityVerdict(ok=False, info=ProbeResult(), error=str(exc))
    ok = is_voice_eligible(info)
    if not ok:
        logger.debug("Not voice eligible: %s", info)
    return EligibilityVerdict(ok=ok, info=info)
