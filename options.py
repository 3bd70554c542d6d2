# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO


@dataclass(init=False)
class Options:
	boot_img: BinaryIO
	output: str
	format: str
	null: bool
	keep_empty_ramdisk: bool
	split_dtb: bool
