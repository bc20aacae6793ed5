"""Constants for authorization payload field names"""


class OAuthFields:
    """Field names of the OAuth refresh-token exchange"""
    REFRESH_TOKEN = "refresh_token"
    CLIENT_ID = "client_id"
    GRANT_TYPE = "grant_type"
    ACCESS_TOKEN = "access_token"

    GRANT_TYPE_REFRESH = "refresh_token"


class JwtFields:
    """Field names of the JWT issue request"""
    EXPIRE_AFTER = "expire_after"
    POLICY_ID = "policy_id"
    OAUTH_ACCESS_TOKEN = "google_oauth_access_token"
    EMBED_OAUTH_ACCESS_TOKEN = "embed_google_oauth_access_token"
    JWT = "jwt"

    # Header carrying the API key
    API_KEY_HEADER = "x-goog-api-key"
