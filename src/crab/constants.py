# crab/constants.py

# Database location, relative to the user's home directory
DATA_DIR_NAME = ".crab"
DATABASE_FILENAME = "credentials.json"
BACKUP_SUFFIX = ".bak"

DATABASE_VERSION = "1.0"

# Environment variable read by the CLI to override the database path
DB_PATH_ENVVAR = "CRAB_DB_PATH"

DATABASE_FILE_MODE = 0o600
