# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import struct
from typing import BinaryIO, Tuple

from errors import TruncatedInput


class Reader:
	"""
	Sequential little endian field reader on top of a seekable binary stream.
	Every read takes the name of the field being read so that a short read
	can be reported as TruncatedInput for exactly that field.
	"""

	def __init__(self, f: BinaryIO) -> None:
		self.f = f

	def read(self, size: int, field: str) -> bytes:
		b = self.f.read(size)
		if len(b) != size:
			raise TruncatedInput(field)
		return b

	def skip(self, size: int, field: str) -> None:
		# Read instead of seek, seeking past the end is not an error for files
		self.read(size, field)

	def seek(self, offset: int, field: str) -> None:
		try:
			self.f.seek(offset)
		except (OSError, ValueError) as e:
			raise TruncatedInput(field) from e

	def unpack(self, fmt: str, field: str) -> Tuple:
		return struct.unpack(fmt, self.read(struct.calcsize(fmt), field))

	def u32(self, field: str) -> int:
		return self.unpack('<I', field)[0]

	def u64(self, field: str) -> int:
		return self.unpack('<Q', field)[0]

	def u32_array(self, count: int, field: str) -> Tuple[int, ...]:
		return self.unpack(f'<{count}I', field)

	def string(self, size: int, field: str) -> str:
		b = self.read(size, field)
		return b.split(b'\0', 1)[0].decode(errors='replace')
