# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import argparse
import os
import shlex
import sys
from typing import List, Optional, Sequence

import image
from errors import BootImageError
from options import Options


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		description="Unpack Android boot and vendor_boot images")
	parser.add_argument('--boot_img', required=True, type=argparse.FileType('rb'), help="""
		Path to the boot.img or vendor_boot.img to unpack
	""")
	parser.add_argument('-o', '--out', '--output', dest='output', default='out', help="""
		Directory to extract the images to (default: %(default)s)
	""")
	parser.add_argument('--format', choices=['info', 'mkbootimg'], default='info', help="""
		Print the decoded header as human readable text (info) or as
		arguments that can be passed to mkbootimg to rebuild the image (mkbootimg)
	""")
	parser.add_argument('-0', '--null', action='store_true', help="""
		Terminate each mkbootimg argument with a null byte instead of
		separating them with spaces, for use with xargs -0
	""")
	parser.add_argument('--keep_empty_ramdisk', action='store_true', help="""
		Always extract the ramdisk of boot images with header version < 3,
		even if it is empty.
	""")
	parser.add_argument('--split_dtb', action='store_true', help="""
		Split the extracted dtb into the individual device trees it contains
		(dtb00, dtb01, ...). Requires pylibfdt.
	""")
	return parser


def print_mkbootimg_args(args: List[str], null: bool) -> None:
	if null:
		sys.stdout.write(''.join(arg + '\0' for arg in args))
		sys.stdout.flush()
	else:
		print(' '.join(shlex.quote(arg) for arg in args))


def main(argv: Optional[Sequence[str]] = None) -> int:
	args = build_parser().parse_args(argv, namespace=Options())

	dtb = None
	if args.split_dtb:
		try:
			import dtb
		except ImportError:
			args.boot_img.close()
			print("ERROR: --split_dtb requires pylibfdt", file=sys.stderr)
			return 1

	try:
		with args.boot_img as f:
			info = image.unpack(f, args.output, args.keep_empty_ramdisk)

		trees = []
		if dtb and info.dtb_size:
			trees = dtb.split_file(os.path.join(args.output, 'dtb'), args.output)
	except BootImageError as e:
		print(f"ERROR: {e}", file=sys.stderr)
		return 1
	except OSError as e:
		print(f"ERROR: {e.filename}: {e.strerror}", file=sys.stderr)
		return 1

	if args.format == 'info':
		print(info.format_info())
		for dt in trees:
			print(dt.describe())
	else:
		print_mkbootimg_args(info.mkbootimg_args(args.output), args.null)

	return 0


if __name__ == '__main__':
	sys.exit(main())
