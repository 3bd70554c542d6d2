# SPDX-License-Identifier: GPL-2.0-only
#
# The OS version and patch level share a single 32-bit header word:
#   bits 31-11: version, 7 bits each for A.B.C
#   bits 10-0:  patch level, 7 bits year (offset from 2000) and 4 bits month
#
from __future__ import annotations

from typing import Optional, Tuple

PATCH_LEVEL_BITS = 11
PATCH_LEVEL_MASK = (1 << PATCH_LEVEL_BITS) - 1


def decode_version(bits: int) -> Optional[str]:
	if bits == 0:
		return None
	a = bits >> 14
	b = (bits >> 7) & 0x7f
	c = bits & 0x7f
	return f'{a}.{b}.{c}'


def decode_patch_level(bits: int) -> Optional[str]:
	if bits == 0:
		return None
	year = (bits >> 4) + 2000
	month = bits & 0x0f
	if not 1 <= month <= 12:
		return None
	return f'{year:04d}-{month:02d}'


def decode(word: int) -> Tuple[Optional[str], Optional[str]]:
	return decode_version(word >> PATCH_LEVEL_BITS), decode_patch_level(word & PATCH_LEVEL_MASK)


def encode(version: Optional[str], patch_level: Optional[str]) -> int:
	"""
	Pack an OS version ("A.B.C") and patch level ("YYYY-MM") into the header
	word, the way mkbootimg does. Either half may be None.
	"""
	word = 0
	if version:
		a, b, c = (int(x) for x in version.split('.'))
		assert a < 128 and b < 128 and c < 128, f"Invalid os version: {version}"
		word |= (a << 14 | b << 7 | c) << PATCH_LEVEL_BITS
	if patch_level:
		year, month = (int(x) for x in patch_level.split('-')[:2])
		assert 2000 <= year < 2128 and 1 <= month <= 12, f"Invalid os patch level: {patch_level}"
		word |= (year - 2000) << 4 | month
	return word
