"""
Django settings for the SwapRide project.

All deployment knobs come from environment variables. A local `.env`
file is loaded first so development setups don't need exported vars.
"""

import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def env_bool(name, default='False'):
    return os.getenv(name, default).lower() in ('true', '1', 'yes')


# ==========================================
# CORE
# ==========================================

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-swapride-dev-key-change-me')

DEBUG = env_bool('DJANGO_DEBUG', 'False')

ALLOWED_HOSTS = [h.strip() for h in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Local apps
    'apps.users',
    'apps.listings',
    'apps.notifications',
    'apps.swaps',
    'apps.payments',
    'apps.reports',
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

ROOT_URLCONF = 'SwapRide.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'SwapRide.wsgi.application'
ASGI_APPLICATION = 'SwapRide.asgi.application'


# ==========================================
# DATABASE
# ==========================================
# SQLite for local development, PostgreSQL in production
# (DB_ENGINE=django.db.backends.postgresql)

DB_ENGINE = os.getenv('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE.endswith('sqlite3'):
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.getenv('DB_NAME', 'swapride'),
            'USER': os.getenv('DB_USER', ''),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
            'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '60')),
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

AUTH_USER_MODEL = 'users.CustomUser'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


# ==========================================
# I18N / STATIC
# ==========================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# ==========================================
# URLS
# ==========================================

SITE_URL = os.getenv('SITE_URL', 'http://localhost:8000')
CLIENT_URL = os.getenv('CLIENT_URL', 'http://localhost:3000')


# ==========================================
# EMAIL
# ==========================================

EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.smtp.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtp.gmail.com')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', '587'))
EMAIL_USE_TLS = env_bool('EMAIL_USE_TLS', 'True')
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', 'noreply@swapride.com')

ADMIN_EMAILS = [e.strip() for e in os.getenv('ADMIN_EMAILS', 'admin@swapride.com').split(',') if e.strip()]


# ==========================================
# EXTERNAL SERVICES
# ==========================================

PAYMENT_GATEWAY = {
    'BASE_URL': os.getenv('PAYMENT_GATEWAY_URL', 'https://api.korapay.com/merchant/api/v1'),
    'SECRET_KEY': os.getenv('PAYMENT_GATEWAY_SECRET_KEY', ''),
    'PUBLIC_KEY': os.getenv('PAYMENT_GATEWAY_PUBLIC_KEY', ''),
    'WEBHOOK_SECRET': os.getenv('PAYMENT_WEBHOOK_SECRET', ''),
    'USE_MOCK': env_bool('USE_MOCK_PAYMENT_GATEWAY', 'True'),
    'TIMEOUT': int(os.getenv('PAYMENT_GATEWAY_TIMEOUT', '30')),
}

NOTIFICATIONS = {
    'USE_MOCK': env_bool('USE_MOCK_NOTIFICATIONS', 'True'),
    'TERMII_API_KEY': os.getenv('TERMII_API_KEY', ''),
    'TERMII_SENDER_ID': os.getenv('TERMII_SENDER_ID', 'SwapRide'),
    'REALTIME_GATEWAY_URL': os.getenv('REALTIME_GATEWAY_URL', ''),
    'REALTIME_GATEWAY_TOKEN': os.getenv('REALTIME_GATEWAY_TOKEN', ''),
    'SMS_PREFIX': 'SwapRide',
}


# ==========================================
# BUSINESS RULES
# ==========================================

SWAPRIDE = {
    'DEFAULT_CURRENCY': 'USD',
    'SUBSCRIPTION_PRICES': {
        'basic': Decimal('9.99'),
        'premium': Decimal('29.99'),
        'enterprise': Decimal('99.99'),
    },
    # Days of access granted per plan; unlisted plans get the default
    'SUBSCRIPTION_DURATIONS': {
        'premium': 30,
    },
    'SUBSCRIPTION_DEFAULT_DURATION': 365,
    'FEATURE_LISTING_PRICE': Decimal('10.00'),
    'BOOST_AD_PRICE': Decimal('5.00'),
    'PROMOTION_DEFAULT_DAYS': 7,
    'PROMOTION_MAX_DAYS': 90,
    'PAGE_SIZE': 20,
    'MAX_PAGE_SIZE': 100,
}


# ==========================================
# LOGGING
# ==========================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'core': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}
