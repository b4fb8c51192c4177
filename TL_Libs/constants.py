"""
Constants and configuration values for Translucify.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Flood fill defaults
DEFAULT_TOLERANCE = 0.05
DEFAULT_SEED_X = 0
DEFAULT_SEED_Y = 0
CHANNELS_PER_PIXEL = 4

# File naming
OUTPUT_FILE_PREFIX = "translucent_"
DEFAULT_OUTPUT_FORMAT = "PNG"
DEFAULT_OUTPUT_TEMPLATE = "{NAME}.png"

# Formats that cannot store an alpha channel
FORMATS_WITHOUT_ALPHA = {"JPEG", "BMP"}

# Job file constants
JOBS_DIR_NAME = "Jobs"
JOB_EXTENSION = ".tljob"
SCHEMA_VERSION = 1

# Safe filename characters
SAFE_FILENAME_CHARS = "-_"
FILENAME_REPLACEMENT_CHAR = "_"

# Job field names
FIELD_SCHEMA_VERSION = "schema_version"
FIELD_NAME = "name"
FIELD_CREATED_AT = "created_at"
FIELD_IMAGE_PATHS = "image_paths"
FIELD_TOLERANCE = "tolerance"
FIELD_SEED_X = "seed_x"
FIELD_SEED_Y = "seed_y"
FIELD_OUTPUT_DIR = "output_dir"
FIELD_OUTPUT_PATH = "output_path"
FIELD_OVERWRITE = "overwrite"

# Node types
NODE_TYPE_IMAGE_IMPORT = "Image Import"
NODE_TYPE_TRANSLUCIFY = "Translucify"
NODE_TYPE_OUTPUT = "Output"

# Supported file formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
SUPPORTED_GIF = {".gif"}
