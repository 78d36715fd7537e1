# Pickle sizes (sizeof(T) on the wire)
SIZE_INT32 = 4
SIZE_UINT32 = 4
SIZE_INT64 = 8
SIZE_UINT64 = 8
SIZE_FLOAT = 4
SIZE_DOUBLE = 8

# Allocation granularity of a pickle payload
PAYLOAD_UNIT = 64

# Largest integer a JS number can hold; capacity of a pickle parsed from bytes
CAPACITY_READ_ONLY = 9007199254740992

# Outer size header: a pickle holding one uint32
HEADER_SIZE_LENGTH = 8

# Integrity
INTEGRITY_ALGORITHM = "SHA256"
BLOCK_SIZE = 4 * 1024 * 1024  # 4 MiB
BUFFER_SIZE = 64 * 1024

# Packed files are addressed with 32-bit sizes
MAX_FILE_SIZE = 0xFFFFFFFF

UNPACKED_SUFFIX = ".unpacked"

# Default crawl pattern, matched against paths relative to the source root
DEFAULT_PATTERN = "*"

# Width-padded markers for `list --is-pack`
PACK_STATE_PACKED = "pack  "
PACK_STATE_UNPACKED = "unpack"


def align_int(i: int, alignment: int) -> int:
    """Round ``i`` up to the next multiple of ``alignment``."""
    return i + (alignment - (i % alignment)) % alignment
