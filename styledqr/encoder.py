"""Symbol encoder adapter: content string -> raw module matrix + alignment centers."""

from dataclasses import dataclass
from enum import Enum

import qrcode
import qrcode.constants
import qrcode.exceptions
import qrcode.util

from styledqr.errors import ConfigurationError, EncodingError
from styledqr.logging import audit, get_logger, trace

log = get_logger("encoder")


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}


@dataclass(frozen=True)
class Symbol:
    """An encoded QR symbol before styling.

    ``modules[row][col]`` is True for a dark module.
    """

    version: int
    size: int
    modules: list[list[bool]]
    alignment_centers: list[int]


def ecc_level(name: str) -> ECCLevel:
    try:
        return ECC_NAMES[name.upper()]
    except (KeyError, AttributeError):
        raise ConfigurationError(f"Unknown error correction level: {name!r}") from None


@trace
def encode_symbol(content: str, ecl: str = "M") -> Symbol:
    """Encode *content* at the smallest version that fits.

    Raises:
        ConfigurationError: empty content or unknown level.
        EncodingError: the encoder rejected the content (e.g. too long).
    """
    if not content:
        raise ConfigurationError("Found empty content.")
    level = ecc_level(ecl)

    qr = qrcode.QRCode(
        version=None,
        error_correction=level.value,
        box_size=1,
        border=0,
    )
    try:
        qr.add_data(content.encode("utf-8"))
        qr.make(fit=True)
    except (qrcode.exceptions.DataOverflowError, ValueError) as e:
        raise EncodingError("Failed to encode content", str(e) or type(e).__name__) from e

    modules = [[bool(m) for m in row] for row in qr.modules]
    symbol = Symbol(
        version=qr.version,
        size=len(modules),
        modules=modules,
        alignment_centers=list(qrcode.util.pattern_position(qr.version)),
    )
    audit("symbol.encoded", logger=log,
          data=content[:80], version=symbol.version,
          size=f"{symbol.size}x{symbol.size}", ecc=level.name,
          alignment_centers=symbol.alignment_centers)
    return symbol
