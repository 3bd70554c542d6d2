# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

from typing import NamedTuple


class Segment(NamedTuple):
	offset: int
	size: int
	name: str


def pages(size: int, page_size: int) -> int:
	if page_size == 0:
		return 0
	return (size + page_size - 1) // page_size
