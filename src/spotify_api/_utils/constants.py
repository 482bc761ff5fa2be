# Environment variables
ENV_CLIENT_ID = "SPOTIFY_CLIENT_ID"
ENV_CLIENT_SECRET = "SPOTIFY_CLIENT_SECRET"
ENV_REDIRECT_URI = "SPOTIFY_REDIRECT_URI"
ENV_API_BASE_URL = "SPOTIFY_API_BASE_URL"
ENV_ACCOUNTS_BASE_URL = "SPOTIFY_ACCOUNTS_BASE_URL"
ENV_REQUEST_TIMEOUT = "SPOTIFY_REQUEST_TIMEOUT"
ENV_TOKEN_FILE = "SPOTIFY_TOKEN_FILE"

# Endpoints
DEFAULT_API_BASE_URL = "https://api.spotify.com/v1"
DEFAULT_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"
AUTHORIZE_PATH = "/authorize"
TOKEN_PATH = "/api/token"

# Headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_RETRY_AFTER = "retry-after"

FORM_URLENCODED = "application/x-www-form-urlencoded"

DEFAULT_TIMEOUT = 30.0
DEFAULT_TOKEN_FILE = ".spotify_token.json"
