# FILE: rxprint/services/access_code.py
from __future__ import annotations

import logging
import random
import re
import secrets
from typing import Optional

from rxprint.schemas.prescription import PrescriptionData

logger = logging.getLogger(__name__)

# no 0/O/1/I
ACCESS_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ACCESS_CODE_PREFIX = "RX"
GROUP_LEN = 4

_CODE_RE = re.compile(r"^RX-[%s]{4}-[%s]{4}$" %
                      (ACCESS_CODE_ALPHABET, ACCESS_CODE_ALPHABET))


def _group(rng: random.Random) -> str:
    return "".join(rng.choice(ACCESS_CODE_ALPHABET) for _ in range(GROUP_LEN))


def generate_access_code(rng: Optional[random.Random] = None) -> str:
    """
    RX-XXXX-XXXX from the 32-symbol alphabet.
    Not collision-checked: uniqueness belongs to whoever persists it.
    """
    rng = rng or secrets.SystemRandom()
    return f"{ACCESS_CODE_PREFIX}-{_group(rng)}-{_group(rng)}"


def is_access_code(value: str) -> bool:
    return bool(_CODE_RE.match((value or "").strip().upper()))


def finalize_prescription(data: PrescriptionData,
                          rng: Optional[random.Random] = None
                          ) -> PrescriptionData:
    """
    Attach a fresh access code. Call once per print/export action and hand
    the returned copy to every output path so they all show the same code.
    """
    code = generate_access_code(rng)
    logger.info("Finalized prescription patient=%r code=%s",
                data.patient.name, code)
    return data.with_access_code(code)
