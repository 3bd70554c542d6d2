# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import IntEnum, unique
from typing import List, Tuple

from errors import InvalidInput
from reader import Reader
from segment import Segment, pages

VENDOR_BOOT_MAGIC = b'VNDRBOOT'
VENDOR_BOOT_MAGIC_SIZE = 8

VENDOR_BOOT_ARGS_SIZE = 2048
VENDOR_BOOT_NAME_SIZE = 16
VENDOR_RAMDISK_NAME_SIZE = 32
VENDOR_RAMDISK_TABLE_ENTRY_BOARD_ID_SIZE = 4

# The part of a table entry we read, newer tools append more board id words
VENDOR_RAMDISK_TABLE_ENTRY_SIZE = 4 * 3 + VENDOR_RAMDISK_NAME_SIZE + 4 * VENDOR_RAMDISK_TABLE_ENTRY_BOARD_ID_SIZE


@unique
class RamdiskType(IntEnum):
	NONE = 0
	PLATFORM = 1
	RECOVERY = 2
	DLKM = 3

	@staticmethod
	def parse(value: int) -> RamdiskType:
		try:
			return RamdiskType(value)
		except ValueError:
			return RamdiskType.NONE

	def __str__(self) -> str:
		return self.name.lower()


@dataclass(frozen=True)
class VendorRamdiskTableEntry:
	output_name: str
	size: int
	offset: int
	type: RamdiskType
	name: str
	board_id: Tuple[int, ...]

	@staticmethod
	def parse(r: Reader, index: int) -> VendorRamdiskTableEntry:
		output_name = f'vendor_ramdisk{index:02d}'
		field = f'vendor ramdisk table entry {output_name}'
		size = r.u32(field)
		offset = r.u32(field)
		ramdisk_type = RamdiskType.parse(r.u32(field))
		name = r.string(VENDOR_RAMDISK_NAME_SIZE, field)
		board_id = r.u32_array(VENDOR_RAMDISK_TABLE_ENTRY_BOARD_ID_SIZE, field)
		return VendorRamdiskTableEntry(output_name, size, offset, ramdisk_type, name, board_id)


@dataclass(frozen=True)
class VendorBootImageInfo:
	boot_magic: str
	header_version: int
	page_size: int
	kernel_load_address: int
	ramdisk_load_address: int
	vendor_ramdisk_size: int
	cmdline: str
	tags_load_address: int
	product_name: str
	header_size: int
	dtb_size: int
	dtb_load_address: int

	# v4+
	vendor_ramdisk_table_size: int = 0
	vendor_ramdisk_table_entry_num: int = 0
	vendor_ramdisk_table_entry_size: int = 0
	vendor_bootconfig_size: int = 0
	vendor_ramdisk_table: Tuple[VendorRamdiskTableEntry, ...] = ()

	@staticmethod
	def parse(r: Reader) -> VendorBootImageInfo:
		f = {
			'boot_magic': r.string(VENDOR_BOOT_MAGIC_SIZE, 'boot magic'),
			'header_version': r.u32('header_version'),
			'page_size': r.u32('page_size'),
			'kernel_load_address': r.u32('kernel_load_address'),
			'ramdisk_load_address': r.u32('ramdisk_load_address'),
			'vendor_ramdisk_size': r.u32('vendor_ramdisk_size'),
			'cmdline': r.string(VENDOR_BOOT_ARGS_SIZE, 'vendor cmdline'),
			'tags_load_address': r.u32('tags_load_address'),
			'product_name': r.string(VENDOR_BOOT_NAME_SIZE, 'product name'),
			'header_size': r.u32('header_size'),
			'dtb_size': r.u32('dtb_size'),
			'dtb_load_address': r.u64('dtb_load_address'),
		}

		if f['header_version'] > 3:
			f['vendor_ramdisk_table_size'] = r.u32('vendor_ramdisk_table_size')
			f['vendor_ramdisk_table_entry_num'] = r.u32('vendor_ramdisk_table_entry_num')
			f['vendor_ramdisk_table_entry_size'] = r.u32('vendor_ramdisk_table_entry_size')
			f['vendor_bootconfig_size'] = r.u32('vendor_bootconfig_size')

			info = VendorBootImageInfo(**f)
			return VendorBootImageInfo(**f, vendor_ramdisk_table=tuple(info.read_ramdisk_table(r)))

		return VendorBootImageInfo(**f)

	@property
	def ramdisk_table_offset(self) -> int:
		# The table follows the vendor ramdisk section and the DTB
		return self.page_size * (pages(self.header_size, self.page_size)
								 + pages(self.vendor_ramdisk_size, self.page_size)
								 + pages(self.dtb_size, self.page_size))

	def read_ramdisk_table(self, r: Reader) -> List[VendorRamdiskTableEntry]:
		"""
		Read all vendor ramdisk table entries, in table order.
		Each entry is located separately with a seek since the entry size
		in the header may be larger than the part we understand.
		"""
		num = self.vendor_ramdisk_table_entry_num
		entry_size = self.vendor_ramdisk_table_entry_size
		if num and entry_size < VENDOR_RAMDISK_TABLE_ENTRY_SIZE:
			raise InvalidInput(f"Invalid vendor ramdisk table entry size: {entry_size}")
		if num * entry_size > self.vendor_ramdisk_table_size:
			raise InvalidInput(f"Vendor ramdisk table with {num} entries does not fit "
							   f"in {self.vendor_ramdisk_table_size} bytes")

		table_offset = self.ramdisk_table_offset
		entries = []
		for i in range(num):
			r.seek(table_offset + entry_size * i, f'vendor ramdisk table entry {i}')
			entries.append(VendorRamdiskTableEntry.parse(r, i))
		return entries

	def segments(self, keep_empty_ramdisk: bool = False) -> List[Segment]:
		# Vendor ramdisks are always extracted since mkbootimg needs them back,
		# so keep_empty_ramdisk does not change anything here.
		page_size = self.page_size
		num_header_pages = pages(self.header_size, page_size)
		ramdisk_offset_base = page_size * num_header_pages

		segments = []
		if self.header_version > 3:
			for entry in self.vendor_ramdisk_table:
				segments.append(Segment(ramdisk_offset_base + entry.offset, entry.size, entry.output_name))

			bootconfig_offset = self.ramdisk_table_offset + page_size * pages(self.vendor_ramdisk_table_size, page_size)
			segments.append(Segment(bootconfig_offset, self.vendor_bootconfig_size, 'bootconfig'))
		else:
			segments.append(Segment(ramdisk_offset_base, self.vendor_ramdisk_size, 'vendor_ramdisk'))

		if self.dtb_size:
			dtb_offset = page_size * (num_header_pages + pages(self.vendor_ramdisk_size, page_size))
			segments.append(Segment(dtb_offset, self.dtb_size, 'dtb'))

		return segments

	def ramdisk_aliases(self) -> List[Tuple[str, str]]:
		return [(entry.output_name, entry.name) for entry in self.vendor_ramdisk_table if entry.name]

	def format_info(self) -> str:
		lines = [
			f'boot magic: {self.boot_magic}',
			f'vendor boot image header version: {self.header_version}',
			f'page size: {self.page_size}',
			f'kernel load address: {self.kernel_load_address:#x}',
			f'ramdisk load address: {self.ramdisk_load_address:#x}',
		]

		if self.header_version > 3:
			lines.append(f'vendor ramdisk total size: {self.vendor_ramdisk_size}')
		else:
			lines.append(f'vendor ramdisk size: {self.vendor_ramdisk_size}')

		lines += [
			f'vendor command line args: {self.cmdline}',
			f'kernel tags load address: {self.tags_load_address:#x}',
			f'product name: {self.product_name}',
			f'vendor boot image header size: {self.header_size}',
			f'dtb size: {self.dtb_size}',
			f'dtb address: {self.dtb_load_address:#x}',
		]

		if self.header_version > 3:
			lines += [
				f'vendor ramdisk table size: {self.vendor_ramdisk_table_size}',
				'vendor ramdisk table:',
				'[',
			]
			for entry in self.vendor_ramdisk_table:
				lines += [
					f'    {entry.output_name}: {{',
					f'        size: {entry.size}',
					f'        offset: {entry.offset}',
					f'        type: {entry.type!s}',
					f'        name: {entry.name}',
					'        board_id: [',
					'            ' + ', '.join(f'{i:#x}' for i in entry.board_id) + ',',
					'        ]',
					'    }',
				]
			lines += [
				']',
				f'vendor bootconfig size: {self.vendor_bootconfig_size}',
			]

		return '\n'.join(lines)

	def mkbootimg_args(self, image_dir: str) -> List[str]:
		args = [
			'--header_version', str(self.header_version),
			'--pagesize', f'{self.page_size:#x}',
			'--base', '0x0',
			'--kernel_offset', f'{self.kernel_load_address:#x}',
			'--ramdisk_offset', f'{self.ramdisk_load_address:#x}',
			'--tags_offset', f'{self.tags_load_address:#x}',
			'--dtb_offset', f'{self.dtb_load_address:#x}',
			'--vendor_cmdline', self.cmdline,
			'--board', self.product_name,
		]

		if self.dtb_size:
			args += ['--dtb', os.path.join(image_dir, 'dtb')]

		if self.header_version > 3:
			args += ['--vendor_bootconfig', os.path.join(image_dir, 'bootconfig')]
			for entry in self.vendor_ramdisk_table:
				args += [
					'--ramdisk_type', str(entry.type),
					'--ramdisk_name', entry.name,
					'--vendor_ramdisk_fragment', os.path.join(image_dir, entry.output_name),
				]
		else:
			args += ['--vendor_ramdisk', os.path.join(image_dir, 'vendor_ramdisk')]

		return args
