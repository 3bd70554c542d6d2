# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations


class BootImageError(Exception):
	pass


class TruncatedInput(BootImageError):
	def __init__(self, field: str) -> None:
		super().__init__(f"Error while reading {field} (premature end or corrupt file)")
		self.field = field


class UnrecognizedFormat(BootImageError):
	def __init__(self, magic: bytes) -> None:
		super().__init__(f"Invalid boot magic: {magic!r}")
		self.magic = magic


class OutputWriteFailure(BootImageError):
	def __init__(self, path: str, reason: str = None) -> None:
		msg = f"Could not write {path}"
		if reason:
			msg += f": {reason}"
		super().__init__(msg)
		self.path = path


class InvalidInput(BootImageError):
	pass
