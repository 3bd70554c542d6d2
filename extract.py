# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import os
import sys
from typing import BinaryIO, List, Tuple

from errors import OutputWriteFailure, TruncatedInput
from segment import Segment

CHUNK_SIZE = 65536
RAMDISK_ALIAS_DIR = 'vendor-ramdisk-by-name'


def make_output_dir(path: str) -> None:
	try:
		os.makedirs(path, exist_ok=True)
	except OSError as e:
		raise OutputWriteFailure(path, e.strerror) from e


def extract_segment(f: BinaryIO, out_dir: str, segment: Segment) -> str:
	path = os.path.join(out_dir, segment.name)
	try:
		o = open(path, 'wb')
	except OSError as e:
		raise OutputWriteFailure(path, e.strerror) from e

	with o:
		if not segment.size:
			return path

		try:
			f.seek(segment.offset)
		except (OSError, ValueError) as e:
			raise TruncatedInput(segment.name) from e

		remaining = segment.size
		while remaining:
			b = f.read(min(remaining, CHUNK_SIZE))
			if not b:
				raise TruncatedInput(segment.name)
			try:
				o.write(b)
			except OSError as e:
				raise OutputWriteFailure(path, e.strerror) from e
			remaining -= len(b)

	return path


def extract_segments(f: BinaryIO, out_dir: str, segments: List[Segment]) -> List[str]:
	return [extract_segment(f, out_dir, segment) for segment in segments]


def create_ramdisk_aliases(out_dir: str, aliases: List[Tuple[str, str]]) -> bool:
	"""
	Create vendor-ramdisk-by-name/ramdisk_<name> symlinks for the named
	vendor ramdisk fragments. The fragments were already extracted at this
	point, so failures are only reported. Returns False if any link failed.
	"""
	alias_dir = os.path.join(out_dir, RAMDISK_ALIAS_DIR)
	try:
		os.makedirs(alias_dir, exist_ok=True)
	except OSError as e:
		print(f"WARNING: Could not create {alias_dir}: {e.strerror}", file=sys.stderr)
		return False

	ok = True
	for output_name, name in aliases:
		src = os.path.relpath(os.path.join(out_dir, output_name), alias_dir)
		dst = os.path.join(alias_dir, f'ramdisk_{name}')
		try:
			if os.path.lexists(dst):
				os.remove(dst)
			os.symlink(src, dst)
		except OSError as e:
			print(f"WARNING: Could not create symlink {dst}: {e.strerror}", file=sys.stderr)
			ok = False

	return ok
