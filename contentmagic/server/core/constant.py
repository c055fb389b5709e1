PROJECT_NAME = "ContentMagic"
VERSION = "0.1.0"
API_PREFIX = "/api"
