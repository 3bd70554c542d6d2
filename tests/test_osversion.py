# SPDX-License-Identifier: GPL-2.0-only
import pytest

import osversion


def test_zero_word():
	assert osversion.decode(0) == (None, None)


def test_round_trip():
	word = osversion.encode('3.2.1', '2021-05')
	assert word == ((3 << 14 | 2 << 7 | 1) << 11) | (21 << 4 | 5)
	assert osversion.decode(word) == ('3.2.1', '2021-05')


def test_only_patch_level():
	assert osversion.decode(osversion.encode(None, '2019-12')) == (None, '2019-12')


def test_only_version():
	assert osversion.decode(osversion.encode('11.0.0', None)) == ('11.0.0', None)


@pytest.mark.parametrize('month', [0, 13, 15])
def test_invalid_month_is_absent(month):
	word = osversion.encode('12.0.0', None) | (22 << 4 | month)
	assert osversion.decode(word) == ('12.0.0', None)


def test_patch_level_is_zero_padded():
	assert osversion.decode_patch_level(1 << 4 | 1) == '2001-01'
