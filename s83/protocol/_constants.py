"""Protocol constants shared by clients and servers."""

SPRING_VERSION = "83"

KEY_LEN = 64
SIG_LEN = 128
MAX_BOARD_LEN = 2217
MAX_NUM_BOARDS = 10_000_000
YEAR_BASE = 2000  # update in year 3000

TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
BOARD_EXT = ".s83"

HEADER_VERSION = "Spring-Version"
HEADER_SIGNATURE = "Spring-Signature"
HEADER_IF_MODIFIED_SINCE = "If-Modified-Since"

# Ever-changing board served by every server.
TEST_PUBLIC = "ab589f4dde9fce4180fcf42c7b05185b0a02a5d682e353fa39177995083e0583"
TEST_PRIVATE = "3371f8b011f51632fea33ed0a3688c26a45498205c6097c352bd4d079d224419"

# Always refused.
INFERNAL_KEY = "d17eef211f510479ee6696495a2589f7e9fb055c2576749747d93444883e0123"
