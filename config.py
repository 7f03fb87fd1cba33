# app settings, read from the environment with safe local defaults
import os


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('VISIONTRACK_DATABASE_URL', 'sqlite:///visiontrack.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('VISIONTRACK_SECRET_KEY', 'visiontrack-dev-key')

    # optional narrative insights on the dashboard
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY', '')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash')

    AUDIT_LOG_LIMIT = 500
    CURRENCY = '৳'
    LOG_LEVEL = os.environ.get('VISIONTRACK_LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SECRET_KEY = 'test-secret-key'
    GEMINI_API_KEY = ''
    LOG_LEVEL = 'WARNING'
