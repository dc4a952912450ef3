"""Logging configuration."""

from server.settings.components import config

# See https://docs.python.org/3/library/logging.config.html#configuration-dictionary-schema

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
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
        'level': config('DJANGO_LOG_LEVEL', default='INFO'),
    },
    'loggers': {
        'server': {
            'handlers': ['console'],
            'level': config('DJANGO_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
        # boto3 and botocore are very chatty on DEBUG
        'botocore': {
            'level': 'WARNING',
        },
        'boto3': {
            'level': 'WARNING',
        },
    },
}
