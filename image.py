# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

from typing import BinaryIO, Union

import extract
from bootimg import BOOT_MAGIC, BOOT_MAGIC_SIZE, BootImageInfo
from errors import InvalidInput, UnrecognizedFormat
from reader import Reader
from vendorbootimg import VENDOR_BOOT_MAGIC, VendorBootImageInfo

BootImage = Union[BootImageInfo, VendorBootImageInfo]


def parse(f: BinaryIO) -> BootImage:
	if not f.seekable():
		raise InvalidInput("Boot image must be a regular file, it cannot be read from a pipe")

	r = Reader(f)
	magic = r.read(BOOT_MAGIC_SIZE, 'boot magic')
	r.seek(0, 'boot magic')

	if magic == BOOT_MAGIC:
		return BootImageInfo.parse(r)
	if magic == VENDOR_BOOT_MAGIC:
		return VendorBootImageInfo.parse(r)
	raise UnrecognizedFormat(magic)


def unpack(f: BinaryIO, out_dir: str, keep_empty_ramdisk: bool = False) -> BootImage:
	"""
	Decode the image header and extract all sub-images into out_dir.
	Nothing is written if the header cannot be decoded.
	"""
	info = parse(f)
	segments = info.segments(keep_empty_ramdisk)

	extract.make_output_dir(out_dir)
	extract.extract_segments(f, out_dir, segments)

	aliases = info.ramdisk_aliases()
	if aliases:
		extract.create_ramdisk_aliases(out_dir, aliases)

	return info
