import os

class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    INVENTORY_API_URL = os.getenv('INVENTORY_API_URL', 'http://localhost:3000/api')
    INVENTORY_API_TIMEOUT = float(os.getenv('INVENTORY_API_TIMEOUT', '10'))
    INVENTORY_PAGE_SIZE = int(os.getenv('INVENTORY_PAGE_SIZE', '10'))
    INVENTORY_MAX_SESSIONS = int(os.getenv('INVENTORY_MAX_SESSIONS', '500'))
    INVENTORY_SESSION_TTL = float(os.getenv('INVENTORY_SESSION_TTL', '1800'))
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False

class DevConfig(BaseConfig):
    DEBUG = True
    ENV = 'development'

class ProdConfig(BaseConfig):
    DEBUG = False
    ENV = 'production'
    SESSION_COOKIE_SECURE = True
