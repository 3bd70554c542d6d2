# SPDX-License-Identifier: GPL-2.0-only
#
# The dtb section of boot and vendor_boot images is usually a plain
# concatenation of flattened device trees, one per supported board.
#
from __future__ import annotations

import os
import struct
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from libfdt import FdtException

from errors import OutputWriteFailure
from fdt2 import ROOT_NODE, Fdt2

FDT_MAGIC = 0xd00dfeed
FDT_HEADER_FORMAT = '>II'  # magic, totalsize
FDT_HEADER_SIZE = 40


@dataclass
class DeviceTree:
	index: int
	offset: int
	data: bytes
	model: Optional[str] = None
	compatible: List[str] = field(default_factory=list)

	@property
	def name(self) -> str:
		return f'dtb{self.index:02d}'

	def describe(self) -> str:
		return f"{self.name}: {self.model or 'unknown'} ({', '.join(self.compatible)})"


def _parse(index: int, offset: int, data: bytes) -> DeviceTree:
	dt = DeviceTree(index, offset, data)
	try:
		fdt = Fdt2(data)
		dt.model = fdt.getprop_str(ROOT_NODE, 'model')
		dt.compatible = fdt.getprop_str_list(ROOT_NODE, 'compatible')
	except FdtException as e:
		print(f"WARNING: Failed to parse {dt.name}: {e}", file=sys.stderr)
	return dt


def split(blob: bytes) -> List[DeviceTree]:
	trees = []
	offset = 0
	while offset < len(blob):
		remaining = len(blob) - offset
		if remaining < FDT_HEADER_SIZE:
			print(f"WARNING: Ignoring {remaining} trailing bytes in dtb", file=sys.stderr)
			break

		magic, size = struct.unpack_from(FDT_HEADER_FORMAT, blob, offset)
		if magic != FDT_MAGIC:
			print(f"WARNING: Ignoring {remaining} trailing bytes in dtb (no device tree)", file=sys.stderr)
			break
		if size < FDT_HEADER_SIZE or size > remaining:
			print(f"WARNING: Device tree {len(trees)} is truncated, ignoring it", file=sys.stderr)
			break

		trees.append(_parse(len(trees), offset, blob[offset:offset + size]))
		offset += size

	return trees


def split_file(path: str, out_dir: str) -> List[DeviceTree]:
	with open(path, 'rb') as f:
		trees = split(f.read())

	for dt in trees:
		out = os.path.join(out_dir, dt.name)
		try:
			with open(out, 'wb') as o:
				o.write(dt.data)
		except OSError as e:
			raise OutputWriteFailure(out, e.strerror) from e

	return trees
