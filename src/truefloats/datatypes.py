from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np


@dataclass(frozen=True)
class FloatTypeSpec:
    name: str
    bits: int
    exponent_bits: int
    mantissa_bits: int
    numpy_dtype: Any
    uint_dtype: Any

    @property
    def hex_digits(self) -> int:
        return self.bits // 4

    @property
    def bias(self) -> int:
        return (1 << (self.exponent_bits - 1)) - 1


DOUBLE = FloatTypeSpec(
    name="double",
    bits=64,
    exponent_bits=11,
    mantissa_bits=52,
    numpy_dtype=np.float64,
    uint_dtype=np.uint64,
)


@dataclass(frozen=True)
class FloatBits:
    hex: str
    sign: str
    exponent: str
    fraction: str
    classification: str

    @property
    def raw(self) -> int:
        return int(self.hex, 16)

    @property
    def bit_text(self) -> str:
        return self.sign + self.exponent + self.fraction


def _classify(sign_bits: str, exponent_raw: int, mantissa_raw: int, spec: FloatTypeSpec) -> str:
    exponent_all_ones = (1 << spec.exponent_bits) - 1
    if exponent_raw == exponent_all_ones and mantissa_raw != 0:
        return "NaN"
    if exponent_raw == exponent_all_ones:
        return "+inf" if sign_bits == "0" else "-inf"
    if exponent_raw == 0 and mantissa_raw == 0:
        return "+0" if sign_bits == "0" else "-0"
    if exponent_raw == 0:
        return "subnormal"
    return "normal"


def _float_bits_from_raw(raw: int, spec: FloatTypeSpec = DOUBLE) -> FloatBits:
    bit_text = format(raw, f"0{spec.bits}b")
    sign_bits = bit_text[:1]
    exponent_bits = bit_text[1 : 1 + spec.exponent_bits]
    mantissa_bits = bit_text[1 + spec.exponent_bits :]

    return FloatBits(
        hex="0x" + format(raw, f"0{spec.hex_digits}x"),
        sign=sign_bits,
        exponent=exponent_bits,
        fraction=mantissa_bits,
        classification=_classify(
            sign_bits, int(exponent_bits, 2), int(mantissa_bits, 2), spec
        ),
    )


def raw_bits(value: float, spec: FloatTypeSpec = DOUBLE) -> int:
    np_value = np.array([value], dtype=spec.numpy_dtype)
    return int(np_value.view(spec.uint_dtype)[0])


def value_from_raw(raw: int, spec: FloatTypeSpec = DOUBLE) -> float:
    np_raw = np.array([raw], dtype=spec.uint_dtype)
    return float(np_raw.view(spec.numpy_dtype)[0])


def ieee754_hex(value: float) -> str:
    return "0x" + format(raw_bits(value), f"0{DOUBLE.hex_digits}x")


def bits_of(value: float) -> FloatBits:
    """Sign, exponent and fraction fields of ``value`` as a binary64.

    Defined for every input, NaN and infinities included.
    """
    return _float_bits_from_raw(raw_bits(value))


def bits_from_hex(hex_text: str) -> FloatBits | None:
    """Re-derive the field breakdown from a saved ``0x``-prefixed encoding.

    Returns ``None`` unless the text holds exactly 16 hex digits.
    """
    cleaned = hex_text.strip()
    if cleaned[:2] in {"0x", "0X"}:
        cleaned = cleaned[2:]
    if len(cleaned) != DOUBLE.hex_digits:
        return None
    if any(ch not in "0123456789abcdefABCDEF" for ch in cleaned):
        return None
    return _float_bits_from_raw(int(cleaned, 16))


def format_bit_breakdown(bits: FloatBits) -> str:
    return f"{bits.sign} | {bits.exponent} | {bits.fraction}"


def format_reverse_calc(bits: FloatBits, spec: FloatTypeSpec = DOUBLE) -> str:
    sign = int(bits.sign)
    exponent_raw = int(bits.exponent, 2)
    mantissa_raw = int(bits.fraction, 2)

    classification = bits.classification
    if classification == "NaN":
        return "Exponent all 1s with non-zero fraction -> NaN"
    if classification in {"+inf", "-inf"}:
        return "Exponent all 1s with zero fraction -> infinity"
    if classification in {"+0", "-0"}:
        return f"(-1)^{sign} * 0 -> {classification}"

    if classification == "subnormal":
        return (
            f"(-1)^{sign} * ({mantissa_raw} / 2^{spec.mantissa_bits}) "
            f"* 2^(1-{spec.bias})"
        )

    return (
        f"(-1)^{sign} * (1 + {mantissa_raw}/2^{spec.mantissa_bits}) "
        f"* 2^({exponent_raw}-{spec.bias})"
    )
