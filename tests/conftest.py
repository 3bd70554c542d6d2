# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import io
import struct
from typing import Optional, Sequence, Tuple

import pytest

import osversion
from bootimg import BOOT_MAGIC
from segment import pages
from vendorbootimg import VENDOR_BOOT_MAGIC

KERNEL_ADDR = 0x10008000
RAMDISK_ADDR = 0x11000000
SECOND_ADDR = 0x10f00000
TAGS_ADDR = 0x10000100
DTB_ADDR = 0x11f00000


def pad(b: bytes, page_size: int) -> bytes:
	return b + bytes(pages(len(b), page_size) * page_size - len(b))


def boot_header(version: int, page_size: int = 2048, kernel_size: int = 0, ramdisk_size: int = 0,
				second_size: int = 0, os_version: Optional[str] = None, os_patch_level: Optional[str] = None,
				board: str = '', cmdline: str = '', extra_cmdline: str = '',
				recovery_dtbo_size: int = 0, recovery_dtbo_offset: int = 0,
				dtb_size: int = 0, boot_signature_size: int = 0) -> bytes:
	os_word = osversion.encode(os_version, os_patch_level)

	if version >= 3:
		header_size = 1584 if version >= 4 else 1580
		h = struct.pack('<8s9I1536s', BOOT_MAGIC, kernel_size, ramdisk_size, os_word, header_size,
						0, 0, 0, 0, version, cmdline.encode())
		if version >= 4:
			h += struct.pack('<I', boot_signature_size)
		return h

	# The SHA region is filled with garbage, it must never be checked
	h = struct.pack('<8s10I16s512s32s1024s', BOOT_MAGIC, kernel_size, KERNEL_ADDR, ramdisk_size, RAMDISK_ADDR,
					second_size, SECOND_ADDR, TAGS_ADDR, page_size, version, os_word,
					board.encode(), cmdline.encode(), b'\xff' * 32, extra_cmdline.encode())
	if version in (1, 2):
		header_size = len(h) + 16 + (12 if version == 2 else 0)
		h += struct.pack('<IQI', recovery_dtbo_size, recovery_dtbo_offset, header_size)
	if version == 2:
		h += struct.pack('<IQ', dtb_size, DTB_ADDR)
	return h


def boot_image(version: int = 2, page_size: int = 2048, kernel: bytes = b'', ramdisk: bytes = b'',
			   second: bytes = b'', recovery_dtbo: bytes = b'', dtb: bytes = b'', boot_signature: bytes = b'',
			   **kwargs) -> bytes:
	if version >= 3:
		page_size = 4096

	recovery_dtbo_offset = 0
	if recovery_dtbo:
		recovery_dtbo_offset = page_size * (1 + pages(len(kernel), page_size) + pages(len(ramdisk), page_size)
											+ pages(len(second), page_size))

	header = boot_header(version, page_size, kernel_size=len(kernel), ramdisk_size=len(ramdisk),
						 second_size=len(second), recovery_dtbo_size=len(recovery_dtbo),
						 recovery_dtbo_offset=recovery_dtbo_offset, dtb_size=len(dtb),
						 boot_signature_size=len(boot_signature), **kwargs)

	return b''.join(pad(b, page_size) for b in (header, kernel, ramdisk, second, recovery_dtbo, dtb, boot_signature))


def vendor_boot_image(version: int = 4, page_size: int = 4096,
					  ramdisks: Sequence[Tuple[bytes, str, int]] = (), dtb: bytes = b'', bootconfig: bytes = b'',
					  cmdline: str = '', board: str = '', entry_size: int = 108) -> bytes:
	"""
	ramdisks is a list of (data, name, type) fragments. v3 images have no
	table, their fragments are simply concatenated into one vendor ramdisk.
	"""
	ramdisk = b''.join(data for data, _, _ in ramdisks)
	header_size = 2128 if version > 3 else 2112

	h = struct.pack('<8s5I2048sI16sIIQ', VENDOR_BOOT_MAGIC, version, page_size, KERNEL_ADDR, RAMDISK_ADDR,
					len(ramdisk), cmdline.encode(), TAGS_ADDR, board.encode(), header_size, len(dtb), DTB_ADDR)
	if version <= 3:
		return pad(h, page_size) + pad(ramdisk, page_size) + pad(dtb, page_size)

	table = b''
	offset = 0
	for data, name, ramdisk_type in ramdisks:
		entry = struct.pack('<III32s4I', len(data), offset, ramdisk_type, name.encode(), 1, 2, 3, 4)
		table += entry + bytes(entry_size - len(entry))
		offset += len(data)

	h += struct.pack('<4I', len(table), len(ramdisks), entry_size, len(bootconfig))
	return b''.join(pad(b, page_size) for b in (h, ramdisk, dtb, table, bootconfig))


class SeekRecorder(io.BytesIO):
	def __init__(self, data: bytes) -> None:
		self.seeks = []
		super().__init__(data)
		self.seeks = []

	def seek(self, offset, whence=io.SEEK_SET):
		self.seeks.append(offset)
		return super().seek(offset, whence)


@pytest.fixture
def write_image(tmp_path):
	def write(data: bytes, name: str = 'boot.img') -> str:
		path = tmp_path / name
		path.write_bytes(data)
		return str(path)
	return write


class Pipe(io.BytesIO):
	def seekable(self):
		return False
