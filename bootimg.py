# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

import osversion
from reader import Reader
from segment import Segment, pages

BOOT_MAGIC = b'ANDROID!'
BOOT_MAGIC_SIZE = 8

BOOT_IMAGE_HEADER_V3_PAGESIZE = 4096
BOOT_NAME_SIZE = 16
BOOT_ARGS_SIZE = 512
BOOT_EXTRA_ARGS_SIZE = 1024
SHA_LENGTH = 32

# The first nine words of every header version. The version is the last of
# them, so the words are named after the v0-v2 layout until it is known.
HEADER_WORDS = (
	'kernel_size',
	'kernel_load_address',
	'ramdisk_size',
	'ramdisk_load_address',
	'second_size',
	'second_load_address',
	'tags_load_address',
	'page_size',
	'header_version',
)


@dataclass(frozen=True)
class BootImageInfo:
	boot_magic: str
	header_version: int
	kernel_size: int
	ramdisk_size: int
	page_size: int
	os_version: Optional[str]
	os_patch_level: Optional[str]
	cmdline: str

	# v0-v2
	kernel_load_address: int = 0
	ramdisk_load_address: int = 0
	second_size: int = 0
	second_load_address: int = 0
	tags_load_address: int = 0
	product_name: str = ''
	extra_cmdline: str = ''

	# v1-v2
	recovery_dtbo_size: int = 0
	recovery_dtbo_offset: int = 0
	boot_header_size: int = 0

	# v2
	dtb_size: int = 0
	dtb_load_address: int = 0

	# v4+
	boot_signature_size: int = 0

	@staticmethod
	def parse(r: Reader) -> BootImageInfo:
		f = {'boot_magic': r.string(BOOT_MAGIC_SIZE, 'boot magic')}

		words = [r.u32(name) for name in HEADER_WORDS]
		version = words[8]
		f['header_version'] = version

		if version < 3:
			(f['kernel_size'], f['kernel_load_address'], f['ramdisk_size'], f['ramdisk_load_address'],
			 f['second_size'], f['second_load_address'], f['tags_load_address'], f['page_size']) = words[:8]
			os_word = r.u32('os_version')

			f['product_name'] = r.string(BOOT_NAME_SIZE, 'board name')
			f['cmdline'] = r.string(BOOT_ARGS_SIZE, 'boot cmdline')
			# SHA-1 of the image contents, mkbootimg only fills it in sometimes
			r.skip(SHA_LENGTH, 'checksum')
			f['extra_cmdline'] = r.string(BOOT_EXTRA_ARGS_SIZE, 'boot extra cmdline')
		else:
			f['kernel_size'], f['ramdisk_size'], os_word = words[:3]
			f['page_size'] = BOOT_IMAGE_HEADER_V3_PAGESIZE
			f['cmdline'] = r.string(BOOT_ARGS_SIZE + BOOT_EXTRA_ARGS_SIZE, 'boot cmdline')

		f['os_version'], f['os_patch_level'] = osversion.decode(os_word)

		if version in (1, 2):
			f['recovery_dtbo_size'] = r.u32('recovery_dtbo_size')
			f['recovery_dtbo_offset'] = r.u64('recovery_dtbo_offset')
			f['boot_header_size'] = r.u32('boot_header_size')

		if version == 2:
			f['dtb_size'] = r.u32('dtb_size')
			f['dtb_load_address'] = r.u64('dtb_load_address')

		if version >= 4:
			f['boot_signature_size'] = r.u32('boot_signature_size')

		return BootImageInfo(**f)

	def segments(self, keep_empty_ramdisk: bool = False) -> List[Segment]:
		"""
		Compute the location of all sub-images present in the image.
		Everything after the header is page aligned, except for the
		recovery DTBO which has its own absolute offset in the header.

		keep_empty_ramdisk emits the ramdisk even when it is empty
		(only on the v0-v2 path), as older unpack tools used to do.
		"""
		page_size = self.page_size
		num_header_pages = 1
		num_kernel_pages = pages(self.kernel_size, page_size)
		num_ramdisk_pages = pages(self.ramdisk_size, page_size)
		num_second_pages = pages(self.second_size, page_size)
		num_recovery_dtbo_pages = pages(self.recovery_dtbo_size, page_size)

		segments = []
		if self.kernel_size:
			segments.append(Segment(page_size * num_header_pages, self.kernel_size, 'kernel'))

		if self.ramdisk_size or (keep_empty_ramdisk and self.header_version < 3):
			segments.append(Segment(page_size * (num_header_pages + num_kernel_pages),
									self.ramdisk_size, 'ramdisk'))

		if self.second_size:
			segments.append(Segment(page_size * (num_header_pages + num_kernel_pages + num_ramdisk_pages),
									self.second_size, 'second'))

		if self.recovery_dtbo_size:
			segments.append(Segment(self.recovery_dtbo_offset, self.recovery_dtbo_size, 'recovery_dtbo'))

		if self.dtb_size:
			segments.append(Segment(page_size * (num_header_pages + num_kernel_pages + num_ramdisk_pages
												 + num_second_pages + num_recovery_dtbo_pages),
									self.dtb_size, 'dtb'))

		# v4 has no second stage, the signature takes its place
		if self.boot_signature_size:
			segments.append(Segment(page_size * (num_header_pages + num_kernel_pages + num_ramdisk_pages),
									self.boot_signature_size, 'boot_signature'))

		return segments

	def ramdisk_aliases(self) -> List[Tuple[str, str]]:
		return []

	def format_info(self) -> str:
		lines = [f'boot magic: {self.boot_magic}']

		if self.header_version < 3:
			lines += [
				f'kernel_size: {self.kernel_size}',
				f'kernel load address: {self.kernel_load_address:#x}',
				f'ramdisk size: {self.ramdisk_size}',
				f'ramdisk load address: {self.ramdisk_load_address:#x}',
				f'second bootloader size: {self.second_size}',
				f'second bootloader load address: {self.second_load_address:#x}',
				f'kernel tags load address: {self.tags_load_address:#x}',
			]

		lines += [
			f'page size: {self.page_size}',
			f'os version: {self.os_version or ""}',
			f'os patch level: {self.os_patch_level or ""}',
			f'boot image header version: {self.header_version}',
		]

		if self.header_version < 3:
			lines.append(f'product name: {self.product_name}')

		lines.append(f'command line args: {self.cmdline}')

		if self.header_version < 3:
			lines.append(f'additional command line args: {self.extra_cmdline}')

		if self.header_version in (1, 2):
			lines += [
				f'recovery dtbo size: {self.recovery_dtbo_size}',
				f'recovery dtbo offset: {self.recovery_dtbo_offset:#x}',
				f'boot header size: {self.boot_header_size}',
			]

		if self.header_version == 2:
			lines += [
				f'dtb size: {self.dtb_size}',
				f'dtb address: {self.dtb_load_address:#x}',
			]

		if self.header_version >= 4:
			lines.append(f'boot.img signature size: {self.boot_signature_size}')

		return '\n'.join(lines)

	def mkbootimg_args(self, image_dir: str) -> List[str]:
		args = ['--header_version', str(self.header_version)]

		if self.os_version:
			args += ['--os_version', self.os_version]
		if self.os_patch_level:
			args += ['--os_patch_level', self.os_patch_level]

		if self.header_version <= 2:
			args += [
				'--pagesize', str(self.page_size),
				'--base', '0x0',
				'--kernel_offset', f'{self.kernel_load_address:#x}',
				'--ramdisk_offset', f'{self.ramdisk_load_address:#x}',
			]
			if self.header_version == 2:
				args += ['--dtb_offset', f'{self.dtb_load_address:#x}']
			args += [
				'--board', self.product_name,
				'--cmdline', self.cmdline + self.extra_cmdline,
			]
			images = (
				('--kernel', 'kernel', self.kernel_size),
				('--ramdisk', 'ramdisk', self.ramdisk_size),
				('--second', 'second', self.second_size),
				('--recovery_dtbo', 'recovery_dtbo', self.recovery_dtbo_size),
				('--dtb', 'dtb', self.dtb_size),
			)
		else:
			args += ['--cmdline', self.cmdline]
			images = (
				('--kernel', 'kernel', self.kernel_size),
				('--ramdisk', 'ramdisk', self.ramdisk_size),
			)

		for flag, name, size in images:
			if size:
				args += [flag, os.path.join(image_dir, name)]

		return args
