CHUNKSIZE = 32
CHUNK_VOLUME = CHUNKSIZE * CHUNKSIZE * CHUNKSIZE
WORLD_FLOOR = 0

# Chunk blob format version (first byte of every stored chunk)
FORMAT_VERSION = 0

# Taken from hexdump -n 32 /dev/urandom output. SQLite stores it signed.
SQLITE_APP_ID = 0x84eeae3c - (1 << 32)
SQLITE_USER_VERSION = 1
KV_KEY_LENGTH = 16

TRANSACTION_BATCH_SIZE = 50
ZLIB_LEVEL = 1

# Padding (in chunks) around a requested area for each generation phase
PHASE_ONE_PADDING = 2
PHASE_TWO_PADDING = 1

TICK_TIME = 0.05
TICK_INTERVAL = 1
SEED_KEY = 'seed'
LOG_FILE = 'server.log'
