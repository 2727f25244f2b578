# anonychat/util/timeutil.py
from __future__ import annotations

import time
from datetime import datetime
from zoneinfo import ZoneInfo

# Chat logs and violation records are read by admins in Jakarta time
LOCAL_TZ = ZoneInfo("Asia/Jakarta")


def now_ts() -> int:
    """Unix timestamp in whole seconds."""
    return int(time.time())


def now_local() -> str:
    """Human-readable local timestamp used in transcripts and violation records."""
    return datetime.now(LOCAL_TZ).strftime("%d/%m/%Y %H.%M.%S")
