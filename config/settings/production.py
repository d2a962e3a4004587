from .base import *

DEBUG = False
EXPOSE_ERROR_DETAILS = False

# Security settings for production.
# Trust the X-Forwarded-Proto header from the platform proxy.
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
# Redirect all non-HTTPS requests to HTTPS.
SECURE_SSL_REDIRECT = True

SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
X_FRAME_OPTIONS = 'DENY'

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self'; "
    "img-src 'self' data:; "
    "style-src 'self' 'unsafe-inline'; "
    "font-src 'self'; "
    "connect-src 'self' https://*.firebaseio.com https://*.googleapis.com"
)


APP_HOST = os.getenv('APP_HOST', '')

if APP_HOST:
    ALLOWED_HOSTS = [APP_HOST]
    SITE_URL = f'https://{APP_HOST}'
    CSRF_TRUSTED_ORIGINS = [f'https://{APP_HOST}']
