"""
Django settings for the releasehub project.

All environment variables are read here, once, after loading an optional
.env file. Application modules read configuration from django.conf.settings.
"""
import os
from datetime import timedelta
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default=''):
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


def env_vendor_recipients(name):
    """Parse ``Vendor=a@x.com,b@x.com;Other=c@y.com`` into a dict."""
    recipients = {}
    for chunk in os.getenv(name, '').split(';'):
        if '=' not in chunk:
            continue
        vendor, emails = chunk.split('=', 1)
        addresses = [email.strip() for email in emails.split(',') if email.strip()]
        if vendor.strip() and addresses:
            recipients[vendor.strip()] = addresses
    return recipients


SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-change-me-in-production')
DEBUG = env_bool('DEBUG', True)
ALLOWED_HOSTS = env_list('ALLOWED_HOSTS', 'localhost,127.0.0.1')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework_simplejwt',
    'django_filters',
    'releasehub.core',
    'releasehub.locations',
    'releasehub.catalog',
    'releasehub.inventory',
    'releasehub.releases',
    'releasehub.notifications',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'releasehub.config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'releasehub.config.wsgi.application'

# ============================================
# DATABASE
# ============================================
DATABASE_URL = os.getenv('DATABASE_URL')
if DATABASE_URL:
    DATABASES = {
        'default': dj_database_url.parse(DATABASE_URL, conn_max_age=600)
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

AUTH_USER_MODEL = 'core.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('TIME_ZONE', 'America/New_York')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = Path(os.getenv('MEDIA_ROOT', BASE_DIR / 'media'))

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Customer packing slips are stored on the release row
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

# ============================================
# REST FRAMEWORK / JWT
# ============================================
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_FILTER_BACKENDS': (
        'django_filters.rest_framework.DjangoFilterBackend',
    ),
    'EXCEPTION_HANDLER': 'releasehub.core.exceptions.api_exception_handler',
    'DATETIME_FORMAT': '%Y-%m-%dT%H:%M:%S%z',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.getenv('JWT_ACCESS_MINUTES', 60 * 24))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.getenv('JWT_REFRESH_DAYS', 7))),
    'AUTH_HEADER_TYPES': ('Bearer',),
    'USER_ID_FIELD': 'id',
    'USER_ID_CLAIM': 'user_id',
}

# ============================================
# EMAIL CONFIGURATION
# ============================================
if env_bool('EMAIL_CONSOLE', DEBUG and not os.getenv('EMAIL_HOST')):
    EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
else:
    EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
    EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtp.sendgrid.net')
    EMAIL_PORT = int(os.getenv('EMAIL_PORT', 587))
    EMAIL_USE_TLS = env_bool('EMAIL_USE_TLS', True)
    EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
    EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')

EMAIL_FROM = os.getenv('EMAIL_FROM', 'noreply@jdgraphic.com')
EMAIL_FROM_NAME = os.getenv('EMAIL_FROM_NAME', 'EPG Release')
DEFAULT_FROM_EMAIL = f'{EMAIL_FROM_NAME} <{EMAIL_FROM}>'
SERVER_EMAIL = DEFAULT_FROM_EMAIL

RELEASE_EMAIL_TO = env_list('RELEASE_EMAIL_TO', 'nick@jdgraphic.com')
RELEASE_EMAIL_CC = env_list('RELEASE_EMAIL_CC')
INVOICE_REMINDER_TO = env_list('INVOICE_REMINDER_TO', 'nick@jdgraphic.com')
VENDOR_NOTIFY_EMAILS = env_vendor_recipients('VENDOR_NOTIFY_EMAILS')

# ============================================
# DOCUMENT STORAGE (Azure Blob Storage, local media fallback)
# ============================================
AZURE_STORAGE_ACCOUNT_NAME = os.getenv('AZURE_STORAGE_ACCOUNT_NAME', '')
AZURE_STORAGE_ACCOUNT_KEY = os.getenv('AZURE_STORAGE_ACCOUNT_KEY', '')
AZURE_STORAGE_CONTAINER = os.getenv('AZURE_STORAGE_CONTAINER', 'release-documents')
AZURE_BLOB_FOLDER = os.getenv('AZURE_BLOB_FOLDER', 'pdfs').strip()
AZURE_PUBLIC_URL = os.getenv('AZURE_PUBLIC_URL', '')

# ============================================
# INTEGRATIONS
# ============================================
JOB_TRACKING_URL = os.getenv('JOB_TRACKING_URL', '')
JOB_TRACKING_SECRET = os.getenv('JOB_TRACKING_SECRET', '')
JOB_TRACKING_COMPANY_NAME = os.getenv('JOB_TRACKING_COMPANY_NAME', 'Enterprise Print Group')
VENDOR_PORTAL_URL = os.getenv('VENDOR_PORTAL_URL', '')
VENDOR_PORTAL_CUSTOMER_NAME = os.getenv('VENDOR_PORTAL_CUSTOMER_NAME', 'Enterprise Print Group')
INTEGRATION_TIMEOUT = int(os.getenv('INTEGRATION_TIMEOUT', 10))

# Shared secret for the invoice sweep; requests are rejected while unset
CRON_SECRET = os.getenv('CRON_SECRET', '')

# ============================================
# RELEASE DEFAULTS
# ============================================
RELEASE_DEFAULTS = {
    'PALLETS': 5,
    'BOXES': 0,
    'SHIP_VIA': 'Averitt Collect',
    'FREIGHT_TERMS': 'Prepaid',
    'PAYMENT_TERMS': '2% 30, Net 60',
    'SHIPPING_CLASS': '55',
    'SHIP_FROM': {
        'name': 'Enterprise Print Group',
        'address': '6234 Enterprise Drive',
        'city': 'Knoxville',
        'state': 'TN',
        'zip': '37909',
        'country': 'USA',
    },
    'BILL_TO': {
        'name': 'Enterprise Print Group',
        'address': 'P.O. Box 52870',
        'city': 'Knoxville',
        'state': 'TN',
        'zip': '37950',
    },
    'BILL_FROM': {
        'name': 'Impact Direct',
        'address': '1550 N Northwest Highway',
        'city': 'Park Ridge',
        'state': 'IL',
        'zip': '60068',
    },
}

# ============================================
# LOGGING CONFIGURATION
# ============================================
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '[{levelname}] {asctime} {name} - {message}',
            'style': '{',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        },
        'simple': {
            'format': '[{levelname}] {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'level': 'DEBUG',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'releasehub': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}
