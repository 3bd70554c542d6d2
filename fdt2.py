# SPDX-License-Identifier: GPL-2.0-only
import sys

# Extend libfdt with some utility methods
from libfdt import FDT_ERR_NOTFOUND, FdtRo, Property

ROOT_NODE = 0


class Fdt2(FdtRo):
	def getprop_or_none(self, nodeoffset, prop_name):
		prop = self.getprop(nodeoffset, prop_name, [FDT_ERR_NOTFOUND])
		if prop == -FDT_ERR_NOTFOUND:
			return None
		return prop

	def getprop_str(self, nodeoffset, prop_name):
		prop = self.getprop_or_none(nodeoffset, prop_name)
		if prop is None:
			return None
		if not prop.is_str():
			print(f"WARNING: {prop_name} is not a null terminated string:", prop, file=sys.stderr)
			return None
		return prop.as_str()

	def getprop_str_list(self, nodeoffset, prop_name):
		prop = self.getprop_or_none(nodeoffset, prop_name)
		if prop is None:
			return []
		return prop.as_str_list()


def property_is_str(self):
	return len(self) > 0 and self[-1] == 0 and 0 not in self[:-1]


def property_as_str_list(self):
	# e.g. compatible = "vendor,board", "qcom,sm8250";
	return [s.decode(errors='replace') for s in bytes(self).rstrip(b'\0').split(b'\0')]


Property.is_str = property_is_str
Property.as_str_list = property_as_str_list
