"""Writers that stream a segment file onto block devices."""

from .base import BlockWriter, WriterError
from .writer import DEFAULT_BLOCK_SIZE, DeviceWriter, EtchReport, check_source, cyclic_blocks, etch, target_length

__all__ = [
	"BlockWriter",
	"WriterError",
	"DEFAULT_BLOCK_SIZE",
	"DeviceWriter",
	"EtchReport",
	"check_source",
	"cyclic_blocks",
	"etch",
	"target_length",
]
